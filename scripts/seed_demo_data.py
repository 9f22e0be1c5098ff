from __future__ import annotations

from pathlib import Path
import sys

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from reportcards.core.config import get_settings
from reportcards.db.session import create_schema, get_session_factory
from reportcards.schemas.reports import ExamResult, StudentReport, SubjectComment
from reportcards.schemas.students import Student
from reportcards.services.drafting import build_report_entries
from reportcards.store import DatabaseSnapshotStorage, Store
from reportcards.store import selectors


DEMO_PREFIX = "[DEMO]"
DEMO_STUDENTS = [
    ("Emma", "Jansen", None),
    ("Liam", "de Vries", "Li"),
    ("Sofia", "Bakker", None),
    ("Noah", "Visser", None),
]


def main() -> None:
    settings = get_settings()
    if settings.auto_create_schema:
        create_schema()
    store = Store.open(DatabaseSnapshotStorage(get_session_factory()), settings.snapshot_key)

    state = store.state
    year_id = state.active_school_year_id
    if year_id is None:
        raise RuntimeError("No active school year. Start the API once to seed defaults.")

    templates = selectors.active_templates(state, include_archived=False)
    if not templates:
        raise RuntimeError("No assessment template in the active school year.")
    template = templates[0]

    for student in state.students:
        if student.last_name.startswith(DEMO_PREFIX):
            store.delete_student(student.id)
    for report in state.reports:
        if report.general_comment and report.general_comment.startswith(DEMO_PREFIX):
            store.delete_report(report.id)

    for first_name, last_name, name_used in DEMO_STUDENTS:
        student = Student(
            first_name=first_name,
            last_name=f"{DEMO_PREFIX} {last_name}",
            name_used=name_used,
            grade_id=template.grade_id,
            school_year_id=year_id,
        )
        store.add_student(student)

        first_subject = template.subjects[0] if template.subjects else None
        report = StudentReport(
            student_id=student.id,
            assessment_template_id=template.id,
            school_year_id=year_id,
            report_title=template.name,
            entries=build_report_entries(template),
            subject_comments=[
                SubjectComment(
                    subject_id=first_subject.id,
                    teacher_comment=f"{student.display_name} is settling in well.",
                    attitude_towards_learning="Developing",
                )
            ]
            if first_subject
            else None,
            general_comment=f"{DEMO_PREFIX} A good start to the year.",
            exam_results=[
                ExamResult(term="Term 1", date="2025-10-15", title="Unit test", subject="Math", grade=2),
                ExamResult(term="Term 2", date="2026-01-20", title="Reading check", subject="English", grade=3),
            ],
        )
        store.add_report(report)

    print(f"Demo data seeded: {len(DEMO_STUDENTS)} students with one report each.")


if __name__ == "__main__":
    main()
