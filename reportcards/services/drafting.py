from reportcards.models.common import new_id, utcnow
from reportcards.schemas.assessments import AssessmentPoint, AssessmentTemplate, Subject
from reportcards.schemas.reports import ReportEntry, SubjectComment


def _copy_point(point: AssessmentPoint) -> AssessmentPoint:
    return point.model_copy(update={"id": new_id()})


def _copy_subject(subject: Subject) -> Subject:
    return subject.model_copy(
        update={"id": new_id(), "assessment_points": [_copy_point(point) for point in subject.assessment_points]}
    )


def duplicate_template(template: AssessmentTemplate, school_year_id: str) -> AssessmentTemplate:
    """Copy a template into another school year.

    The copy gets fresh ids all the way down so two templates never share subject or
    point ids; the source template is left untouched.
    """
    return template.model_copy(
        update={
            "id": new_id(),
            "school_year_id": school_year_id,
            "created_at": utcnow(),
            "subjects": [_copy_subject(subject) for subject in template.subjects],
            "points": [_copy_point(point) for point in template.points] if template.points is not None else None,
            "static_texts": [text.model_copy() for text in template.static_texts]
            if template.static_texts is not None
            else None,
        }
    )


def build_report_entries(template: AssessmentTemplate) -> list[ReportEntry]:
    """One entry per assessment point, every rating starting at the point's maximum."""
    entries = [
        ReportEntry(assessment_point_id=point.id, subject_id=subject.id, stars=point.max_stars)
        for subject in template.subjects
        for point in subject.assessment_points
    ]
    # flat templates have no subjects to hang entries on
    entries.extend(
        ReportEntry(assessment_point_id=point.id, subject_id="", stars=point.max_stars) for point in template.points or []
    )
    return entries


def keep_meaningful_comments(comments: list[SubjectComment]) -> list[SubjectComment]:
    return [comment for comment in comments if comment.teacher_comment or comment.attitude_towards_learning]
