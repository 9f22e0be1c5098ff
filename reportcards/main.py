import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from reportcards.api import rewrite
from reportcards.api.router import api_router
from reportcards.core.config import get_settings
from reportcards.db.session import create_schema, get_session_factory
from reportcards.services.documents import DocumentService
from reportcards.services.rewrite import RewriteClient
from reportcards.services.staging import RewriteStaging
from reportcards.store import DatabaseSnapshotStorage, Store

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_create_schema:
            create_schema()
        storage = DatabaseSnapshotStorage(get_session_factory())
        app.state.store = Store.open(storage, settings.snapshot_key, seed_defaults=settings.seed_defaults)
        app.state.rewrite_client = RewriteClient(settings)
        app.state.rewrite_staging = RewriteStaging()
        app.state.document_service = DocumentService()
        logger.info("%s started (%s)", settings.app_name, settings.app_env)
        yield
        await app.state.rewrite_client.aclose()

    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    # the browser page calls without credentials, so a literal "*" origin is enough
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    rewrite_path = f"{settings.api_v1_prefix}/ai-rewrite"

    # registered after CORSMiddleware so it runs first; the rewrite preflight has no body
    @app.middleware("http")
    async def answer_rewrite_preflight(request: Request, call_next):
        if request.method == "OPTIONS" and request.url.path == rewrite_path:
            return rewrite.preflight_response()
        return await call_next(request)

    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_app()
