from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

EntityT = TypeVar("EntityT", bound=BaseModel)


class CamelModel(BaseModel):
    """Base for every persisted shape.

    Attributes are snake_case in Python; the wire and snapshot form is camelCase so
    snapshots written by the browser build load unchanged.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def require_text(value: str | None, message: str) -> str:
    if value is None or not value.strip():
        raise ValueError(message)
    return value


def reject_null(value: Any) -> Any:
    if value is None:
        raise ValueError("Field cannot be null")
    return value


def revalidate(entity: EntityT, updates: dict[str, Any]) -> EntityT:
    """Copy of ``entity`` with ``updates`` applied, run through the entity's validators.

    Raises ``ValidationError`` when the combined record breaks a field or cross-field rule,
    so a patch can never leave behind a record that would fail to load later.
    """
    if not updates:
        return entity
    return type(entity).model_validate({**entity.model_dump(), **updates})


def merge(entity: EntityT, patch: BaseModel) -> EntityT:
    """Shallow-merge the fields explicitly set on ``patch`` into a copy of ``entity``."""
    updates = {name: getattr(patch, name) for name in patch.model_fields_set if name in type(entity).model_fields}
    return revalidate(entity, updates)
