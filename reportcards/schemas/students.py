from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator, model_validator

from reportcards.models.common import new_id, utcnow
from reportcards.schemas.base import CamelModel, require_text

DocumentType = Literal["general", "report"]


class Student(CamelModel):
    id: str = Field(default_factory=new_id)
    first_name: str
    last_name: str
    name_used: str | None = None
    date_of_birth: str | None = None
    grade_id: str
    school_year_id: str
    avatar_url: str | None = None

    @field_validator("first_name")
    @classmethod
    def _first_name_required(cls, value: str) -> str:
        return require_text(value, "First name is required")

    @field_validator("last_name")
    @classmethod
    def _last_name_required(cls, value: str) -> str:
        return require_text(value, "Last name is required")

    @field_validator("grade_id")
    @classmethod
    def _grade_required(cls, value: str) -> str:
        return require_text(value, "Grade is required")

    @property
    def display_name(self) -> str:
        return f"{self.name_used or self.first_name} {self.last_name}"


class StudentUpdate(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    name_used: str | None = None
    date_of_birth: str | None = None
    grade_id: str | None = None
    school_year_id: str | None = None
    avatar_url: str | None = None

    @field_validator("first_name")
    @classmethod
    def _first_name_required(cls, value: str | None) -> str:
        return require_text(value, "First name is required")

    @field_validator("last_name")
    @classmethod
    def _last_name_required(cls, value: str | None) -> str:
        return require_text(value, "Last name is required")

    @field_validator("grade_id", "school_year_id")
    @classmethod
    def _reference_required(cls, value: str | None) -> str:
        return require_text(value, "Reference cannot be empty")


class StudentDocument(CamelModel):
    id: str = Field(default_factory=new_id)
    student_id: str
    type: DocumentType = "general"
    report_id: str | None = None
    label: str
    comment: str | None = None
    file_name: str
    file_type: str
    file_data: str
    uploaded_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _report_docs_need_report(self):
        if self.type == "report" and not self.report_id:
            raise ValueError("report documents require reportId")
        return self
