from pydantic import Field

from reportcards.schemas.assessments import AssessmentPoint, AssessmentTemplate, Subject
from reportcards.schemas.base import CamelModel
from reportcards.schemas.reports import ExamResult, StudentReport, SubjectComment
from reportcards.schemas.school import AppSettings, Grade, TeacherAssignment
from reportcards.schemas.students import Student, StudentDocument


class SubjectRow(CamelModel):
    point: AssessmentPoint
    stars: int
    is_na: bool = False
    notes: str | None = None


class SubjectSection(CamelModel):
    subject: Subject
    rows: list[SubjectRow]
    comment: SubjectComment | None = None


class ReportView(CamelModel):
    report: StudentReport
    student: Student | None = None
    template: AssessmentTemplate | None = None
    grade: Grade | None = None
    teachers: dict[str, list[TeacherAssignment]] = Field(default_factory=dict)
    subjects: list[SubjectSection] = Field(default_factory=list)
    exam_results: dict[str, list[ExamResult]] = Field(default_factory=dict)
    settings: AppSettings


class DashboardStats(CamelModel):
    grades: int
    students: int
    assessments: int
    reports: int


class GradeOverviewItem(CamelModel):
    grade: Grade
    students: int
    assessments: int


class TemplateSummary(CamelModel):
    template: AssessmentTemplate
    total_points: int


class StudentDocuments(CamelModel):
    general: list[StudentDocument]
    by_report: dict[str, list[StudentDocument]]


class OkResponse(CamelModel):
    ok: bool = True
