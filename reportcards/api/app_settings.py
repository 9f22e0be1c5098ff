from fastapi import APIRouter, Depends

from reportcards.api.deps import get_store
from reportcards.schemas.school import AppSettings, AppSettingsUpdate
from reportcards.store.store import Store

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=AppSettings)
def get_app_settings(store: Store = Depends(get_store)):
    return store.state.app_settings


@router.patch("", response_model=AppSettings)
def update_app_settings(payload: AppSettingsUpdate, store: Store = Depends(get_store)):
    store.update_app_settings(payload)
    return store.state.app_settings
