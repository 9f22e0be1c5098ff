from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from reportcards.models.common import new_id, utcnow
from reportcards.schemas.base import CamelModel, reject_null, require_text


class AssessmentPoint(CamelModel):
    id: str = Field(default_factory=new_id)
    # older templates called this field "label"
    name: str = Field(..., validation_alias=AliasChoices("name", "label"))
    description: str | None = None
    max_stars: int = Field(default=3, ge=1, le=5)
    order: int = 0

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        return require_text(value, "Assessment point name is required")


class Subject(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    description: str | None = None
    assessment_points: list[AssessmentPoint] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        return require_text(value, "Subject name is required")


class StaticText(CamelModel):
    key: str = Field(default_factory=new_id)
    title: str = ""
    content: str = ""


class AssessmentTemplate(CamelModel):
    id: str = Field(default_factory=new_id)
    grade_id: str
    school_year_id: str
    name: str
    description: str | None = None
    subjects: list[Subject] = Field(default_factory=list)
    points: list[AssessmentPoint] | None = None
    intro_text: str | None = None
    static_texts: list[StaticText] | None = None
    is_archived: bool = False
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        return require_text(value, "Assessment name is required")

    @field_validator("grade_id")
    @classmethod
    def _grade_required(cls, value: str) -> str:
        return require_text(value, "Grade is required")


class AssessmentTemplateUpdate(CamelModel):
    grade_id: str | None = None
    name: str | None = None
    description: str | None = None
    subjects: list[Subject] | None = None
    points: list[AssessmentPoint] | None = None
    intro_text: str | None = None
    static_texts: list[StaticText] | None = None
    is_archived: bool | None = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str | None) -> str:
        return require_text(value, "Assessment name is required")

    @field_validator("grade_id")
    @classmethod
    def _grade_required(cls, value: str | None) -> str:
        return require_text(value, "Grade is required")

    @field_validator("subjects", "is_archived")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


class DuplicateTemplateRequest(CamelModel):
    school_year_id: str

    @field_validator("school_year_id")
    @classmethod
    def _year_required(cls, value: str) -> str:
        return require_text(value, "Please select a school year")
