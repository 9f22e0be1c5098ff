from fastapi import APIRouter, Depends, HTTPException

from reportcards.api.deps import get_store
from reportcards.models.common import utcnow
from reportcards.schemas.reports import SaveReflectionRequest, StudentReport
from reportcards.schemas.views import OkResponse, ReportView
from reportcards.services.sharing import resolve_by_token
from reportcards.store import selectors
from reportcards.store.store import Store

router = APIRouter(prefix="/shared", tags=["shared"])


def _resolve(store: Store, token: str) -> StudentReport:
    report = resolve_by_token(store, token)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.get("/{token}", response_model=ReportView)
def shared_report(token: str, store: Store = Depends(get_store)):
    report = _resolve(store, token)
    return ReportView.model_validate(selectors.report_view(store.state, report))


@router.patch("/{token}/reflections", response_model=OkResponse)
def save_shared_reflection(token: str, payload: SaveReflectionRequest, store: Store = Depends(get_store)):
    # token holders may write reflections and nothing else
    report = _resolve(store, token)
    store.update_report_reflection(report.id, payload.to_patch(utcnow()))
    return OkResponse()
