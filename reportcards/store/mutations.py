"""Pure state transitions.

Every function takes the current :class:`AppState` and returns the next one without
touching its input. A transition that matches nothing returns the very same state object,
which is how the store recognises a no-op.
"""

from collections.abc import Callable, Sequence
from datetime import datetime, timedelta
from typing import TypeVar

from pydantic import BaseModel

from reportcards.schemas.base import merge, revalidate
from reportcards.schemas.reports import (
    ExamResult,
    ExamResultUpdate,
    ReportEntry,
    ReportReflection,
    ReportReflectionUpdate,
    ReportSignature,
    Signature,
    SignatureRole,
    StudentReport,
    SubjectComment,
)
from reportcards.schemas.rewrite import RewriteTarget
from reportcards.schemas.school import AppSettingsUpdate, SchoolYear
from reportcards.schemas.state import AppState
from reportcards.schemas.students import StudentDocument

ItemT = TypeVar("ItemT", bound=BaseModel)

SIGNATURE_FIELDS: dict[str, str] = {
    "classroomTeacher": "classroom_teacher",
    "headOfSchool": "head_of_school",
}


def _replace(items: Sequence[ItemT], item_id: str, change: Callable[[ItemT], ItemT]) -> list[ItemT] | None:
    found = False
    result: list[ItemT] = []
    for item in items:
        if getattr(item, "id") == item_id:
            found = True
            item = change(item)
        result.append(item)
    return result if found else None


def _with(state: AppState, collection: str, items: list | None) -> AppState:
    if items is None:
        return state
    return state.model_copy(update={collection: items})


def add_entity(state: AppState, collection: str, entity: BaseModel) -> AppState:
    return state.model_copy(update={collection: [*getattr(state, collection), entity]})


def update_entity(state: AppState, collection: str, entity_id: str, patch: BaseModel) -> AppState:
    return _with(state, collection, _replace(getattr(state, collection), entity_id, lambda item: merge(item, patch)))


def delete_entity(state: AppState, collection: str, entity_id: str) -> AppState:
    items = getattr(state, collection)
    remaining = [item for item in items if item.id != entity_id]
    if len(remaining) == len(items):
        return state
    return state.model_copy(update={collection: remaining})


def touch(report: StudentReport, now: datetime) -> datetime:
    """Timestamp for the next write; always later than the report's current one."""
    if report.updated_at is not None and now <= report.updated_at:
        return report.updated_at + timedelta(microseconds=1)
    return now


# ---- school years ----


def set_active_school_year(state: AppState, year_id: str) -> AppState:
    years = [
        year if year.is_active == (year.id == year_id) else year.model_copy(update={"is_active": year.id == year_id})
        for year in state.school_years
    ]
    return state.model_copy(update={"active_school_year_id": year_id, "school_years": years})


def add_school_year(state: AppState, year: SchoolYear) -> AppState:
    next_state = add_entity(state, "school_years", year)
    if year.is_active:
        next_state = set_active_school_year(next_state, year.id)
    return next_state


# ---- reports ----


def _update_report(state: AppState, report_id: str, now: datetime, change: Callable[[StudentReport], dict]) -> AppState:
    def apply(report: StudentReport) -> StudentReport:
        updates = change(report)
        updates["updated_at"] = touch(report, now)
        return revalidate(report, updates)

    return _with(state, "reports", _replace(state.reports, report_id, apply))


def update_report(state: AppState, report_id: str, patch: BaseModel, now: datetime) -> AppState:
    fields = {name: getattr(patch, name) for name in patch.model_fields_set if name in StudentReport.model_fields}
    return _update_report(state, report_id, now, lambda _report: dict(fields))


def set_share_token(state: AppState, report_id: str, token: str, now: datetime) -> AppState:
    """Give a report its share token unless it already has one.

    Sharing is not an edit, so updated_at is left alone.
    """

    def share(report: StudentReport) -> StudentReport:
        if report.share_token:
            return report
        return report.model_copy(update={"share_token": token, "shared_at": now})

    return _with(state, "reports", _replace(state.reports, report_id, share))


def add_exam_result(state: AppState, report_id: str, result: ExamResult, now: datetime) -> AppState:
    return _update_report(
        state, report_id, now, lambda report: {"exam_results": [*(report.exam_results or []), result]}
    )


def update_exam_result(
    state: AppState, report_id: str, result_id: str, patch: ExamResultUpdate, now: datetime
) -> AppState:
    return _update_report(
        state,
        report_id,
        now,
        lambda report: {
            "exam_results": [
                merge(result, patch) if result.id == result_id else result for result in report.exam_results or []
            ]
        },
    )


def delete_exam_result(state: AppState, report_id: str, result_id: str, now: datetime) -> AppState:
    return _update_report(
        state,
        report_id,
        now,
        lambda report: {"exam_results": [result for result in report.exam_results or [] if result.id != result_id]},
    )


def update_report_reflection(
    state: AppState, report_id: str, patch: ReportReflectionUpdate, now: datetime
) -> AppState:
    return _update_report(
        state,
        report_id,
        now,
        lambda report: {"reflections": merge(report.reflections or ReportReflection(), patch)},
    )


def sign_report(state: AppState, report_id: str, role: SignatureRole, name: str, now: datetime) -> AppState:
    field = SIGNATURE_FIELDS[role]
    signature = Signature(name=name, signed_at=now)
    return _update_report(
        state,
        report_id,
        now,
        lambda report: {
            "signatures": (report.signatures or ReportSignature()).model_copy(update={field: signature})
        },
    )


def accept_rewrite(state: AppState, report_id: str, target: RewriteTarget, text: str, now: datetime) -> AppState:
    """Write accepted rewrite text into the entry, subject comment or general comment it was made for."""

    def change(report: StudentReport) -> dict:
        if target.kind == "generalComment":
            return {"general_comment": text}

        if target.kind == "subjectComment":
            comments = list(report.subject_comments or [])
            for index, comment in enumerate(comments):
                if comment.subject_id == target.subject_id:
                    comments[index] = comment.model_copy(update={"ai_rewritten_comment": text})
                    break
            else:
                comments.append(SubjectComment(subject_id=target.subject_id or "", ai_rewritten_comment=text))
            return {"subject_comments": comments}

        entries = list(report.entries)
        for index, entry in enumerate(entries):
            if entry.subject_id == target.subject_id and entry.assessment_point_id == target.assessment_point_id:
                entries[index] = entry.model_copy(update={"ai_rewritten_text": text})
                break
        else:
            entries.append(
                ReportEntry(
                    assessment_point_id=target.assessment_point_id or "",
                    subject_id=target.subject_id or "",
                    ai_rewritten_text=text,
                )
            )
        return {"entries": entries}

    return _update_report(state, report_id, now, change)


# ---- documents ----


def replace_general_document(state: AppState, document: StudentDocument) -> AppState:
    """Store ``document`` in its slot, dropping whatever general document held the same label."""
    kept = [
        existing
        for existing in state.documents
        if not (
            existing.type == "general"
            and existing.student_id == document.student_id
            and existing.label == document.label
        )
    ]
    return state.model_copy(update={"documents": [*kept, document]})


# ---- settings ----


def update_app_settings(state: AppState, patch: AppSettingsUpdate) -> AppState:
    settings = merge(state.app_settings, patch)
    if settings is state.app_settings:
        return state
    return state.model_copy(update={"app_settings": settings})
