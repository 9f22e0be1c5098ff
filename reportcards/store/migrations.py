import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

CURRENT_VERSION = 2


class UnsupportedSnapshotVersion(Exception):
    pass


def _wrap_legacy(payload: dict) -> dict:
    # browser builds persisted {"state": {...}, "version": 0}; older dumps were the bare state
    if "state" in payload and isinstance(payload["state"], dict):
        return {"version": 1, "state": payload["state"]}
    return {"version": 1, "state": payload}


def _number_points_and_default_exams(payload: dict) -> dict:
    state = dict(payload["state"])
    templates = []
    for template in state.get("assessmentTemplates", []):
        template = dict(template)
        subjects = []
        for subject in template.get("subjects", []):
            subject = dict(subject)
            subject["assessmentPoints"] = [
                {**point, "order": point.get("order", index)}
                for index, point in enumerate(subject.get("assessmentPoints", []))
            ]
            subjects.append(subject)
        template["subjects"] = subjects
        templates.append(template)
    state["assessmentTemplates"] = templates
    state["reports"] = [{"examResults": [], **report} for report in state.get("reports", [])]
    return {"version": 2, "state": state}


_STEPS: dict[int, Callable[[dict], dict]] = {
    0: _wrap_legacy,
    1: _number_points_and_default_exams,
}


def migrate(payload: dict, version: int) -> dict:
    """Bring a decoded snapshot up to :data:`CURRENT_VERSION` and return its state body."""
    if version > CURRENT_VERSION:
        raise UnsupportedSnapshotVersion(f"Snapshot version {version} is newer than {CURRENT_VERSION}")

    while version < CURRENT_VERSION:
        logger.info("Migrating snapshot from version %s", version)
        payload = _STEPS[version](payload)
        version = payload["version"]
    return payload["state"]
