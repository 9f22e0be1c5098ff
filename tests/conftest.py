from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from reportcards.store import MemorySnapshotStorage, Store

FIXED_NOW = datetime(2026, 1, 15, 9, 0, tzinfo=UTC)


@pytest.fixture()
def app_client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_file.as_posix()}")
    monkeypatch.setenv("AUTO_CREATE_SCHEMA", "true")
    monkeypatch.setenv("SEED_DEFAULTS", "true")
    monkeypatch.setenv("LOVABLE_API_KEY", "test-gateway-key")

    from reportcards.core.config import clear_settings_cache
    from reportcards.db.base import Base
    from reportcards.db.session import get_engine, reset_engine
    from reportcards.main import create_app

    clear_settings_cache()
    reset_engine()

    app = create_app()
    with TestClient(app) as client:
        yield client

    Base.metadata.drop_all(bind=get_engine())
    reset_engine()
    clear_settings_cache()


@pytest.fixture()
def storage() -> MemorySnapshotStorage:
    return MemorySnapshotStorage()


@pytest.fixture()
def store(storage: MemorySnapshotStorage) -> Store:
    """Empty store whose clock never advances, so timestamp ordering is exercised."""
    return Store.open(storage, "test-storage", seed_defaults=False, clock=lambda: FIXED_NOW)


def install_rewrite_transport(client: TestClient, handler) -> list[httpx.Request]:
    """Route the app's rewrite client through ``handler`` and record every upstream request."""
    from reportcards.core.config import get_settings
    from reportcards.services.rewrite import RewriteClient

    calls: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    client.app.state.rewrite_client = RewriteClient(get_settings(), transport=httpx.MockTransport(recording))
    return calls


def chat_completion(text: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}
