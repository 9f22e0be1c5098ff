import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from reportcards.api.deps import get_rewrite_client, get_staging, get_store, require_report
from reportcards.models.common import utcnow
from reportcards.schemas.reports import (
    ExamResult,
    ExamResultUpdate,
    SaveReflectionRequest,
    ShareResponse,
    SignReportRequest,
    StudentReport,
    StudentReportUpdate,
)
from reportcards.schemas.rewrite import AcceptRewriteRequest, RewriteTarget, StagedRewrite, StageRewriteRequest
from reportcards.schemas.views import OkResponse, ReportView
from reportcards.services.drafting import build_report_entries, keep_meaningful_comments
from reportcards.services.rewrite import RewriteClient, RewriteError
from reportcards.services.sharing import assign_share_token
from reportcards.services.staging import RewriteStaging
from reportcards.store import selectors
from reportcards.store.store import Store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])


def _source_text(report: StudentReport, target: RewriteTarget) -> str | None:
    if target.kind == "generalComment":
        return report.general_comment
    if target.kind == "subjectComment":
        comment = report.find_subject_comment(target.subject_id or "")
        return comment.teacher_comment if comment else None
    entry = report.find_entry(target.subject_id or "", target.assessment_point_id or "")
    return entry.teacher_notes if entry else None


@router.get("", response_model=list[StudentReport])
def list_reports(
    active: bool = Query(default=True),
    student_id: str | None = Query(default=None, alias="studentId"),
    store: Store = Depends(get_store),
):
    reports = selectors.active_reports(store.state) if active else store.state.reports
    if student_id:
        reports = [report for report in reports if report.student_id == student_id]
    return reports


@router.post("", response_model=StudentReport)
def create_report(payload: StudentReport, store: Store = Depends(get_store)):
    state = store.state
    if selectors.find_by_id(state.students, payload.student_id) is None:
        raise HTTPException(status_code=404, detail="Student not found")
    template = selectors.find_by_id(state.assessment_templates, payload.assessment_template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Assessment template not found")

    updates = {}
    if not payload.entries:
        updates["entries"] = build_report_entries(template)
    if payload.subject_comments is not None:
        updates["subject_comments"] = keep_meaningful_comments(payload.subject_comments)
    report = payload.model_copy(update=updates) if updates else payload

    store.add_report(report)
    return report


@router.get("/{report_id}", response_model=StudentReport)
def get_report(report_id: str, store: Store = Depends(get_store)):
    return require_report(store, report_id)


@router.patch("/{report_id}", response_model=OkResponse)
def update_report(report_id: str, payload: StudentReportUpdate, store: Store = Depends(get_store)):
    if payload.subject_comments is not None:
        payload = payload.model_copy(update={"subject_comments": keep_meaningful_comments(payload.subject_comments)})
    store.update_report(report_id, payload)
    return OkResponse()


@router.delete("/{report_id}", response_model=OkResponse)
def delete_report(report_id: str, store: Store = Depends(get_store)):
    store.delete_report(report_id)
    return OkResponse()


@router.get("/{report_id}/view", response_model=ReportView)
def report_view(report_id: str, store: Store = Depends(get_store)):
    report = require_report(store, report_id)
    return ReportView.model_validate(selectors.report_view(store.state, report))


@router.post("/{report_id}/share", response_model=ShareResponse)
def share_report(report_id: str, store: Store = Depends(get_store)):
    token = assign_share_token(store, report_id)
    if token is None:
        raise HTTPException(status_code=404, detail="Report not found")
    report = require_report(store, report_id)
    return ShareResponse(share_token=token, shared_at=report.shared_at)


# ---- exam results ----


@router.post("/{report_id}/exam-results", response_model=ExamResult)
def add_exam_result(report_id: str, payload: ExamResult, store: Store = Depends(get_store)):
    require_report(store, report_id)
    store.add_exam_result(report_id, payload)
    return payload


@router.patch("/{report_id}/exam-results/{result_id}", response_model=OkResponse)
def update_exam_result(
    report_id: str,
    result_id: str,
    payload: ExamResultUpdate,
    store: Store = Depends(get_store),
):
    store.update_exam_result(report_id, result_id, payload)
    return OkResponse()


@router.delete("/{report_id}/exam-results/{result_id}", response_model=OkResponse)
def delete_exam_result(report_id: str, result_id: str, store: Store = Depends(get_store)):
    store.delete_exam_result(report_id, result_id)
    return OkResponse()


# ---- reflections and signatures ----


@router.patch("/{report_id}/reflections", response_model=OkResponse)
def save_reflection(report_id: str, payload: SaveReflectionRequest, store: Store = Depends(get_store)):
    store.update_report_reflection(report_id, payload.to_patch(utcnow()))
    return OkResponse()


@router.post("/{report_id}/signatures", response_model=StudentReport)
def sign_report(report_id: str, payload: SignReportRequest, store: Store = Depends(get_store)):
    require_report(store, report_id)
    store.sign_report(report_id, payload.role, payload.name)
    return require_report(store, report_id)


# ---- rewrites ----


@router.post("/{report_id}/rewrites", response_model=StagedRewrite)
async def stage_rewrite(
    report_id: str,
    payload: StageRewriteRequest,
    store: Store = Depends(get_store),
    client: RewriteClient = Depends(get_rewrite_client),
    staging: RewriteStaging = Depends(get_staging),
):
    report = require_report(store, report_id)
    student = selectors.find_by_id(store.state.students, report.student_id)
    text = payload.text if payload.text is not None else _source_text(report, payload.target)

    sequence = staging.begin(report_id, payload.target)
    try:
        rewritten = await client.rewrite(
            text,
            style_guide=store.state.app_settings.company_writing_style or None,
            student_name=student.display_name if student else None,
            provider=payload.provider,
            api_key=payload.custom_api_key,
        )
    except RewriteError as exc:
        staging.abandon(report_id, payload.target, sequence)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "retriable": exc.retriable})

    if not staging.offer(report_id, payload.target, sequence, rewritten):
        logger.info("Discarding superseded rewrite for report %s (%s)", report_id, payload.target.key)
        return JSONResponse(status_code=409, content={"error": "A newer rewrite was requested", "retriable": False})
    return staging.get(report_id, payload.target)


@router.post("/{report_id}/rewrites/accept", response_model=StudentReport)
def accept_rewrite(
    report_id: str,
    payload: AcceptRewriteRequest,
    store: Store = Depends(get_store),
    staging: RewriteStaging = Depends(get_staging),
):
    require_report(store, report_id)
    if staging.accept(store, report_id, payload.target) is None:
        raise HTTPException(status_code=404, detail="No staged rewrite for this target")
    return require_report(store, report_id)


@router.post("/{report_id}/rewrites/discard", response_model=OkResponse)
def discard_rewrite(
    report_id: str,
    payload: AcceptRewriteRequest,
    staging: RewriteStaging = Depends(get_staging),
):
    staging.discard(report_id, payload.target)
    return OkResponse()
