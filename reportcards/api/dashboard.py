from fastapi import APIRouter, Depends

from reportcards.api.deps import get_store
from reportcards.schemas.views import DashboardStats
from reportcards.store import selectors
from reportcards.store.store import Store

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(store: Store = Depends(get_store)):
    return selectors.dashboard_stats(store.state)
