from typing import Literal

from pydantic import Field, field_validator, model_validator

from reportcards.models.common import new_id
from reportcards.schemas.base import CamelModel, reject_null, require_text

TeacherCategory = Literal["core", "professional"]


class SchoolYear(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    start_year: int = Field(..., ge=2000, le=2100)
    end_year: int = Field(..., ge=2000, le=2100)
    is_active: bool = False

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        return require_text(value, "School year name is required")

    @model_validator(mode="after")
    def _check_year_range(self):
        if self.end_year < self.start_year:
            raise ValueError("endYear must be greater than or equal to startYear")
        return self


class TeacherAssignment(CamelModel):
    id: str = Field(default_factory=new_id)
    subject: str
    teacher: str
    category: TeacherCategory = "core"

    @field_validator("subject")
    @classmethod
    def _subject_required(cls, value: str) -> str:
        return require_text(value, "Subject is required")

    @field_validator("teacher")
    @classmethod
    def _teacher_required(cls, value: str) -> str:
        return require_text(value, "Teacher name is required")


class Grade(CamelModel):
    id: str = Field(default_factory=new_id)
    name: str
    description: str | None = None
    color_index: int = Field(default=0, ge=0, le=5)
    order: int = 0
    classroom_teacher: str | None = None
    teacher_assignments: list[TeacherAssignment] | None = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        return require_text(value, "Grade name is required")


class GradeUpdate(CamelModel):
    name: str | None = None
    description: str | None = None
    color_index: int | None = Field(default=None, ge=0, le=5)
    order: int | None = None
    classroom_teacher: str | None = None
    teacher_assignments: list[TeacherAssignment] | None = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str | None) -> str:
        return require_text(value, "Grade name is required")

    @field_validator("color_index", "order")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)


class AppSettings(CamelModel):
    school_name: str = ""
    mission_statement: str = ""
    statement: str = ""
    vision: str = ""
    values: list[str] = Field(default_factory=list)
    grading_key: str = ""
    company_writing_style: str = ""


class AppSettingsUpdate(CamelModel):
    school_name: str | None = None
    mission_statement: str | None = None
    statement: str | None = None
    vision: str | None = None
    values: list[str] | None = None
    grading_key: str | None = None
    company_writing_style: str | None = None

    @field_validator("*")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("Settings fields cannot be null")
        return value


class SchoolYearUpdate(CamelModel):
    name: str | None = None
    start_year: int | None = Field(default=None, ge=2000, le=2100)
    end_year: int | None = Field(default=None, ge=2000, le=2100)

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str | None) -> str:
        return require_text(value, "School year name is required")

    @field_validator("start_year", "end_year")
    @classmethod
    def _not_null(cls, value):
        return reject_null(value)

    @model_validator(mode="after")
    def _validate_when_both_present(self):
        if self.start_year is not None and self.end_year is not None and self.end_year < self.start_year:
            raise ValueError("endYear must be greater than or equal to startYear")
        return self
