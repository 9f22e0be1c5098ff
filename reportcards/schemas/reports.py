from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from reportcards.models.common import new_id, utcnow
from reportcards.schemas.base import CamelModel, reject_null, require_text

ReportStatus = Literal["draft", "completed", "reviewed"]
Attitude = Literal["Emerging", "Developing", "Applying", "Independent"]
SignatureRole = Literal["classroomTeacher", "headOfSchool"]
ReflectionAuthor = Literal["parent", "student"]


class ReportEntry(CamelModel):
    assessment_point_id: str
    subject_id: str
    # 0 means "unset"; displays fall back to the point's maxStars
    stars: int = Field(default=0, ge=0, le=5)
    is_na: bool | None = Field(default=None, alias="isNA")
    teacher_notes: str | None = None
    ai_rewritten_text: str | None = None


class SubjectComment(CamelModel):
    subject_id: str
    teacher_comment: str | None = None
    ai_rewritten_comment: str | None = None
    attitude_towards_learning: Attitude | None = None


class ExamResult(CamelModel):
    id: str = Field(default_factory=new_id)
    term: str
    date: str = ""
    title: str
    subject: str
    grade: int = Field(default=0, ge=0, le=3)
    is_na: bool | None = Field(default=None, alias="isNA")

    @field_validator("term")
    @classmethod
    def _term_required(cls, value: str) -> str:
        return require_text(value, "Term is required")

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        return require_text(value, "Title is required")

    @field_validator("subject")
    @classmethod
    def _subject_required(cls, value: str) -> str:
        return require_text(value, "Subject is required")


class ExamResultUpdate(CamelModel):
    term: str | None = None
    date: str | None = None
    title: str | None = None
    subject: str | None = None
    grade: int | None = Field(default=None, ge=0, le=3)
    is_na: bool | None = Field(default=None, alias="isNA")

    @field_validator("term", "date", "title", "subject", "grade")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


class ReportReflection(CamelModel):
    parent_reflection: str | None = None
    parent_signed_at: datetime | None = None
    student_reflection: str | None = None
    student_signed_at: datetime | None = None


class ReportReflectionUpdate(ReportReflection):
    pass


class SaveReflectionRequest(CamelModel):
    author: ReflectionAuthor
    text: str = ""

    def to_patch(self, signed_at: datetime) -> ReportReflectionUpdate:
        """Saving a reflection also stamps when its author signed it."""
        return ReportReflectionUpdate.model_validate(
            {f"{self.author}_reflection": self.text, f"{self.author}_signed_at": signed_at}
        )


class Signature(CamelModel):
    name: str
    signed_at: datetime


class ReportSignature(CamelModel):
    classroom_teacher: Signature | None = None
    head_of_school: Signature | None = None


class SignReportRequest(CamelModel):
    role: SignatureRole
    name: str

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        return require_text(value, "Signature name is required").strip()


class StudentReport(CamelModel):
    id: str = Field(default_factory=new_id)
    student_id: str
    assessment_template_id: str
    school_year_id: str
    term: str = "Term 1 & 2"
    report_title: str | None = None
    period_start: str | None = None
    period_end: str | None = None
    entries: list[ReportEntry] = Field(default_factory=list)
    subject_comments: list[SubjectComment] | None = None
    general_comment: str | None = None
    status: ReportStatus = "draft"
    share_token: str | None = None
    shared_at: datetime | None = None
    exam_results: list[ExamResult] | None = None
    reflections: ReportReflection | None = None
    signatures: ReportSignature | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("student_id")
    @classmethod
    def _student_required(cls, value: str) -> str:
        return require_text(value, "Please select a student")

    @field_validator("assessment_template_id")
    @classmethod
    def _template_required(cls, value: str) -> str:
        return require_text(value, "Please select an assessment")

    def find_entry(self, subject_id: str, point_id: str) -> ReportEntry | None:
        for entry in self.entries:
            if entry.subject_id == subject_id and entry.assessment_point_id == point_id:
                return entry
        return None

    def find_subject_comment(self, subject_id: str) -> SubjectComment | None:
        for comment in self.subject_comments or []:
            if comment.subject_id == subject_id:
                return comment
        return None


class StudentReportUpdate(CamelModel):
    term: str | None = None
    report_title: str | None = None
    period_start: str | None = None
    period_end: str | None = None
    entries: list[ReportEntry] | None = None
    subject_comments: list[SubjectComment] | None = None
    general_comment: str | None = None
    status: ReportStatus | None = None

    @field_validator("term", "entries", "status")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


class ShareResponse(CamelModel):
    share_token: str
    shared_at: datetime | None
