from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reportcards.core.config import get_settings

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def engine_options(database_url: str) -> dict[str, Any]:
    """Engine keyword arguments for the snapshot table's access pattern.

    The store opens one short session per snapshot write, from whichever threadpool
    worker ran the request, and may then sit idle for a long time.
    """
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        # idle pooled connections may have been dropped by the server between writes
        return {"pool_pre_ping": True}

    # sessions are opened on FastAPI worker threads, not the thread that created the connection
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # every session must see the same in-memory database
        options["poolclass"] = StaticPool
    return options


def _new_engine() -> Engine:
    database_url = get_settings().database_url
    return create_engine(database_url, future=True, **engine_options(database_url))


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = _new_engine()
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), autoflush=False, expire_on_commit=False, future=True)
    return _session_factory


def create_schema() -> None:
    from reportcards.db.base import Base
    from reportcards.models import Snapshot  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def reset_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
