from fastapi import HTTPException, Request

from reportcards.schemas.reports import StudentReport
from reportcards.services.documents import DocumentService
from reportcards.services.rewrite import RewriteClient
from reportcards.services.staging import RewriteStaging
from reportcards.store.selectors import find_by_id
from reportcards.store.store import Store


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_rewrite_client(request: Request) -> RewriteClient:
    return request.app.state.rewrite_client


def get_staging(request: Request) -> RewriteStaging:
    return request.app.state.rewrite_staging


def get_document_service(request: Request) -> DocumentService:
    return request.app.state.document_service


def require_report(store: Store, report_id: str) -> StudentReport:
    report = find_by_id(store.state.reports, report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report
