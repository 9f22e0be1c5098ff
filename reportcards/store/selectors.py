"""Read-side derivations over a store snapshot.

Nothing here caches or mutates; callers pass the latest :class:`AppState` and get plain
values back.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Protocol, TypeVar

from pydantic import BaseModel

from reportcards.schemas.assessments import AssessmentPoint, AssessmentTemplate, Subject
from reportcards.schemas.reports import ExamResult, ReportEntry, StudentReport
from reportcards.schemas.school import Grade, TeacherAssignment
from reportcards.schemas.state import AppState
from reportcards.schemas.students import Student, StudentDocument


class YearScoped(Protocol):
    school_year_id: str


ScopedT = TypeVar("ScopedT", bound=YearScoped)

TermSortKey = Callable[[str], object]


def lexicographic_terms(term: str) -> str:
    return term


def active_for(collection: Iterable[ScopedT], year_id: str | None) -> list[ScopedT]:
    return [item for item in collection if item.school_year_id == year_id]


def group_by_term(
    exam_results: Sequence[ExamResult] | None,
    sort_key: TermSortKey | None = lexicographic_terms,
) -> dict[str, list[ExamResult]]:
    """Group exam results by term label.

    Keys come out ordered by ``sort_key`` (plain string order by default, so "Term 10"
    lands before "Term 2"); pass ``None`` to keep first-seen order.
    """
    groups: dict[str, list[ExamResult]] = {}
    for result in exam_results or []:
        groups.setdefault(result.term, []).append(result)
    if sort_key is None:
        return groups
    return {term: groups[term] for term in sorted(groups, key=sort_key)}


def group_by_category(assignments: Sequence[TeacherAssignment] | None) -> dict[str, list[TeacherAssignment]]:
    grouped: dict[str, list[TeacherAssignment]] = {"core": [], "professional": []}
    for assignment in assignments or []:
        grouped[assignment.category].append(assignment)
    return grouped


def total_points(template: AssessmentTemplate) -> int:
    if template.subjects:
        return sum(len(subject.assessment_points) for subject in template.subjects)
    return len(template.points or [])


def effective_stars(entry: ReportEntry | None, point: AssessmentPoint) -> int:
    if entry is None or entry.stars == 0:
        return point.max_stars
    return entry.stars


def find_by_id(collection: Iterable[BaseModel], entity_id: str | None):
    if entity_id is None:
        return None
    for item in collection:
        if getattr(item, "id", None) == entity_id:
            return item
    return None


def active_students(state: AppState) -> list[Student]:
    return active_for(state.students, state.active_school_year_id)


def active_templates(state: AppState, *, include_archived: bool = True) -> list[AssessmentTemplate]:
    templates = active_for(state.assessment_templates, state.active_school_year_id)
    if include_archived:
        return templates
    return [template for template in templates if not template.is_archived]


def active_reports(state: AppState) -> list[StudentReport]:
    return active_for(state.reports, state.active_school_year_id)


def sorted_grades(state: AppState) -> list[Grade]:
    return sorted(state.grades, key=lambda grade: grade.order)


def templates_for_student(state: AppState, student: Student) -> list[AssessmentTemplate]:
    return [template for template in active_templates(state) if template.grade_id == student.grade_id]


def dashboard_stats(state: AppState) -> dict[str, int]:
    return {
        "grades": len(state.grades),
        "students": len(active_students(state)),
        "assessments": len(active_templates(state)),
        "reports": len(active_reports(state)),
    }


def grade_overview(state: AppState) -> list[dict]:
    students = active_students(state)
    templates = active_templates(state)
    return [
        {
            "grade": grade,
            "students": sum(1 for student in students if student.grade_id == grade.id),
            "assessments": sum(1 for template in templates if template.grade_id == grade.id),
        }
        for grade in sorted_grades(state)
    ]


def student_documents(state: AppState, student_id: str) -> dict:
    """General documents plus report documents grouped by report id."""
    general: list[StudentDocument] = []
    by_report: dict[str, list[StudentDocument]] = {}
    for document in state.documents:
        if document.student_id != student_id:
            continue
        if document.type == "general":
            general.append(document)
        else:
            by_report.setdefault(document.report_id or "unknown", []).append(document)
    return {"general": general, "by_report": by_report}


def subject_rows(report: StudentReport, subject: Subject) -> list[dict]:
    rows = []
    for point in subject.assessment_points:
        entry = report.find_entry(subject.id, point.id)
        rows.append(
            {
                "point": point,
                "stars": effective_stars(entry, point),
                "is_na": bool(entry and entry.is_na),
                "notes": entry and (entry.ai_rewritten_text or entry.teacher_notes),
            }
        )
    return rows


def report_view(state: AppState, report: StudentReport, term_sort_key: TermSortKey | None = lexicographic_terms) -> dict:
    """Everything a rendered report needs, resolved from weak references."""
    student = find_by_id(state.students, report.student_id)
    template = find_by_id(state.assessment_templates, report.assessment_template_id)
    grade = find_by_id(state.grades, student.grade_id) if student else None
    subjects = []
    for subject in template.subjects if template else []:
        comment = report.find_subject_comment(subject.id)
        rows = subject_rows(report, subject)
        has_entries = any(entry.subject_id == subject.id for entry in report.entries)
        if not has_entries and comment is None:
            continue
        subjects.append({"subject": subject, "rows": rows, "comment": comment})
    return {
        "report": report,
        "student": student,
        "template": template,
        "grade": grade,
        "teachers": group_by_category(grade.teacher_assignments if grade else None),
        "subjects": subjects,
        "exam_results": group_by_term(report.exam_results, term_sort_key),
        "settings": state.app_settings,
    }
