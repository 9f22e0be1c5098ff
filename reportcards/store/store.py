import logging
import threading
from collections.abc import Callable
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from reportcards.models.common import utcnow
from reportcards.schemas.assessments import AssessmentTemplate, AssessmentTemplateUpdate
from reportcards.schemas.reports import (
    ExamResult,
    ExamResultUpdate,
    ReportReflectionUpdate,
    SignatureRole,
    StudentReport,
    StudentReportUpdate,
)
from reportcards.schemas.rewrite import RewriteTarget
from reportcards.schemas.school import AppSettingsUpdate, Grade, GradeUpdate, SchoolYear, SchoolYearUpdate
from reportcards.schemas.state import AppState
from reportcards.schemas.students import Student, StudentDocument, StudentUpdate
from reportcards.store import mutations
from reportcards.store.defaults import default_state
from reportcards.store.migrations import CURRENT_VERSION, UnsupportedSnapshotVersion
from reportcards.store.persistence import SnapshotStorage, dump_state, load_state

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Store:
    """Single writer for the whole application state.

    Every named operation computes the next state with a pure transition from
    :mod:`reportcards.store.mutations`, swaps it in under a lock and writes a snapshot.
    Operations that address a missing id change nothing and raise nothing.
    """

    def __init__(
        self,
        storage: SnapshotStorage,
        key: str,
        *,
        state: AppState | None = None,
        clock: Clock = utcnow,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock
        self._lock = threading.RLock()
        self._state = state if state is not None else AppState()
        self.persistence_degraded = False

    @classmethod
    def open(
        cls,
        storage: SnapshotStorage,
        key: str,
        *,
        seed_defaults: bool = True,
        clock: Clock = utcnow,
    ) -> "Store":
        """Rehydrate from ``storage``, falling back to first-run state when nothing usable is stored."""
        store = cls(storage, key, clock=clock)
        try:
            stored = storage.load(key)
        except SQLAlchemyError:
            logger.exception("Could not read snapshot %r, continuing in memory only", key)
            store.persistence_degraded = True
            stored = None

        if stored is not None:
            try:
                store._state = load_state(stored)
                logger.info("Loaded snapshot %r", key)
                return store
            except UnsupportedSnapshotVersion as exc:
                logger.warning("%s; running from defaults in memory only", exc)
                store.persistence_degraded = True
            except (ValueError, ValidationError):
                logger.exception("Snapshot %r is unreadable; running from defaults in memory only", key)
                store.persistence_degraded = True

        store._state = default_state() if seed_defaults else AppState()
        if stored is None:
            store._persist()
        return store

    @property
    def state(self) -> AppState:
        return self._state

    def _persist(self) -> None:
        if self.persistence_degraded:
            return
        try:
            self._storage.save(self._key, CURRENT_VERSION, dump_state(self._state))
        except (SQLAlchemyError, OSError):
            self.persistence_degraded = True
            logger.warning(
                "Snapshot %r could not be written; changes are kept in memory for the rest of this session",
                self._key,
                exc_info=True,
            )

    def _apply(self, transition: Callable[..., AppState], *args) -> AppState:
        with self._lock:
            next_state = transition(self._state, *args)
            if next_state is not self._state:
                self._state = next_state
                self._persist()
            return self._state

    def _now(self) -> datetime:
        return self._clock()

    # ---- school years ----

    def add_school_year(self, year: SchoolYear) -> None:
        self._apply(mutations.add_school_year, year)

    def update_school_year(self, year_id: str, patch: SchoolYearUpdate) -> None:
        self._apply(mutations.update_entity, "school_years", year_id, patch)

    def set_active_school_year(self, year_id: str) -> None:
        self._apply(mutations.set_active_school_year, year_id)

    # ---- grades ----

    def add_grade(self, grade: Grade) -> None:
        self._apply(mutations.add_entity, "grades", grade)

    def update_grade(self, grade_id: str, patch: GradeUpdate) -> None:
        self._apply(mutations.update_entity, "grades", grade_id, patch)

    def delete_grade(self, grade_id: str) -> None:
        self._apply(mutations.delete_entity, "grades", grade_id)

    # ---- assessment templates ----

    def add_assessment_template(self, template: AssessmentTemplate) -> None:
        self._apply(mutations.add_entity, "assessment_templates", template)

    def update_assessment_template(self, template_id: str, patch: AssessmentTemplateUpdate) -> None:
        self._apply(mutations.update_entity, "assessment_templates", template_id, patch)

    def delete_assessment_template(self, template_id: str) -> None:
        self._apply(mutations.delete_entity, "assessment_templates", template_id)

    # ---- students ----

    def add_student(self, student: Student) -> None:
        self._apply(mutations.add_entity, "students", student)

    def update_student(self, student_id: str, patch: StudentUpdate) -> None:
        self._apply(mutations.update_entity, "students", student_id, patch)

    def delete_student(self, student_id: str) -> None:
        self._apply(mutations.delete_entity, "students", student_id)

    # ---- documents ----

    def add_document(self, document: StudentDocument) -> None:
        self._apply(mutations.add_entity, "documents", document)

    def replace_general_document(self, document: StudentDocument) -> None:
        self._apply(mutations.replace_general_document, document)

    def delete_document(self, document_id: str) -> None:
        self._apply(mutations.delete_entity, "documents", document_id)

    # ---- reports ----

    def add_report(self, report: StudentReport) -> None:
        self._apply(mutations.add_entity, "reports", report)

    def update_report(self, report_id: str, patch: StudentReportUpdate) -> None:
        self._apply(mutations.update_report, report_id, patch, self._now())

    def delete_report(self, report_id: str) -> None:
        self._apply(mutations.delete_entity, "reports", report_id)

    def set_share_token(self, report_id: str, token: str) -> None:
        self._apply(mutations.set_share_token, report_id, token, self._now())

    def add_exam_result(self, report_id: str, result: ExamResult) -> None:
        self._apply(mutations.add_exam_result, report_id, result, self._now())

    def update_exam_result(self, report_id: str, result_id: str, patch: ExamResultUpdate) -> None:
        self._apply(mutations.update_exam_result, report_id, result_id, patch, self._now())

    def delete_exam_result(self, report_id: str, result_id: str) -> None:
        self._apply(mutations.delete_exam_result, report_id, result_id, self._now())

    def update_report_reflection(self, report_id: str, patch: ReportReflectionUpdate) -> None:
        self._apply(mutations.update_report_reflection, report_id, patch, self._now())

    def sign_report(self, report_id: str, role: SignatureRole, name: str) -> None:
        self._apply(mutations.sign_report, report_id, role, name, self._now())

    def accept_rewrite(self, report_id: str, target: RewriteTarget, text: str) -> None:
        self._apply(mutations.accept_rewrite, report_id, target, text, self._now())

    # ---- settings ----

    def update_app_settings(self, patch: AppSettingsUpdate) -> None:
        self._apply(mutations.update_app_settings, patch)
