from fastapi import APIRouter, Depends

from reportcards.api.deps import get_store
from reportcards.core.config import get_settings
from reportcards.store.migrations import CURRENT_VERSION
from reportcards.store.store import Store

router = APIRouter(tags=["system"])


@router.get("/health")
def health(store: Store = Depends(get_store)):
    settings = get_settings()
    return {
        "status": "ok",
        "version": settings.app_version,
        "persistence_degraded": store.persistence_degraded,
    }


@router.get("/system/info")
def system_info(store: Store = Depends(get_store)):
    settings = get_settings()
    state = store.state
    return {
        "app_name": settings.app_name,
        "app_env": settings.app_env,
        "app_version": settings.app_version,
        "snapshot_key": settings.snapshot_key,
        "snapshot_version": CURRENT_VERSION,
        "persistence_degraded": store.persistence_degraded,
        "active_school_year_id": state.active_school_year_id,
        "rewrite_gateway_configured": bool(settings.lovable_api_key),
    }
