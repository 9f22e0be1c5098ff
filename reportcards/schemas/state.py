from pydantic import Field

from reportcards.schemas.assessments import AssessmentTemplate
from reportcards.schemas.base import CamelModel
from reportcards.schemas.reports import StudentReport
from reportcards.schemas.school import AppSettings, Grade, SchoolYear
from reportcards.schemas.students import Student, StudentDocument


class AppState(CamelModel):
    """Everything the store holds; also the shape of the persisted snapshot body."""

    school_years: list[SchoolYear] = Field(default_factory=list)
    active_school_year_id: str | None = None
    grades: list[Grade] = Field(default_factory=list)
    assessment_templates: list[AssessmentTemplate] = Field(default_factory=list)
    students: list[Student] = Field(default_factory=list)
    reports: list[StudentReport] = Field(default_factory=list)
    documents: list[StudentDocument] = Field(default_factory=list)
    app_settings: AppSettings = Field(default_factory=AppSettings)
