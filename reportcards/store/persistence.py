import json
import logging
from typing import Protocol

from sqlalchemy.orm import Session, sessionmaker

from reportcards.models.snapshot import Snapshot
from reportcards.schemas.state import AppState
from reportcards.store.migrations import CURRENT_VERSION, migrate

logger = logging.getLogger(__name__)


class StoredSnapshot(Protocol):
    version: int
    payload: str


class SnapshotStorage(Protocol):
    def load(self, key: str) -> StoredSnapshot | None: ...

    def save(self, key: str, version: int, payload: str) -> None: ...


class _Blob:
    def __init__(self, version: int, payload: str) -> None:
        self.version = version
        self.payload = payload


class MemorySnapshotStorage:
    def __init__(self) -> None:
        self.blobs: dict[str, _Blob] = {}

    def load(self, key: str) -> _Blob | None:
        return self.blobs.get(key)

    def save(self, key: str, version: int, payload: str) -> None:
        self.blobs[key] = _Blob(version, payload)


class DatabaseSnapshotStorage:
    """One row per snapshot key in the ``snapshots`` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def load(self, key: str) -> _Blob | None:
        with self.session_factory() as db:
            row = db.get(Snapshot, key)
            if row is None:
                return None
            return _Blob(row.version, row.payload)

    def save(self, key: str, version: int, payload: str) -> None:
        with self.session_factory() as db:
            row = db.get(Snapshot, key)
            if row is None:
                db.add(Snapshot(key=key, version=version, payload=payload))
            else:
                row.version = version
                row.payload = payload
            db.commit()


def dump_state(state: AppState) -> str:
    body = state.model_dump(mode="json", by_alias=True)
    return json.dumps({"version": CURRENT_VERSION, "state": body}, ensure_ascii=False)


def load_state(stored: StoredSnapshot) -> AppState:
    payload = json.loads(stored.payload)
    if not isinstance(payload, dict):
        raise ValueError("Snapshot payload must be a JSON object")
    version = payload.get("version", 0) if "state" in payload else 0
    return AppState.model_validate(migrate(payload, version))
