from fastapi import APIRouter, Depends, HTTPException, Query

from reportcards.api.deps import get_store
from reportcards.schemas.assessments import AssessmentTemplate, AssessmentTemplateUpdate, DuplicateTemplateRequest
from reportcards.schemas.views import OkResponse, TemplateSummary
from reportcards.services.drafting import duplicate_template
from reportcards.store import selectors
from reportcards.store.store import Store

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=list[TemplateSummary])
def list_templates(
    active: bool = Query(default=True),
    grade_id: str | None = Query(default=None, alias="gradeId"),
    include_archived: bool = Query(default=True, alias="includeArchived"),
    store: Store = Depends(get_store),
):
    state = store.state
    templates = selectors.active_templates(state, include_archived=include_archived) if active else state.assessment_templates
    if grade_id:
        templates = [template for template in templates if template.grade_id == grade_id]
    return [TemplateSummary(template=template, total_points=selectors.total_points(template)) for template in templates]


@router.post("", response_model=AssessmentTemplate)
def create_template(payload: AssessmentTemplate, store: Store = Depends(get_store)):
    store.add_assessment_template(payload)
    return payload


@router.get("/{template_id}", response_model=AssessmentTemplate)
def get_template(template_id: str, store: Store = Depends(get_store)):
    template = selectors.find_by_id(store.state.assessment_templates, template_id)
    if template is None:
        raise HTTPException(status_code=404, detail="Assessment template not found")
    return template


@router.patch("/{template_id}", response_model=OkResponse)
def update_template(template_id: str, payload: AssessmentTemplateUpdate, store: Store = Depends(get_store)):
    store.update_assessment_template(template_id, payload)
    return OkResponse()


@router.delete("/{template_id}", response_model=OkResponse)
def delete_template(template_id: str, store: Store = Depends(get_store)):
    store.delete_assessment_template(template_id)
    return OkResponse()


@router.post("/{template_id}/duplicate", response_model=AssessmentTemplate)
def duplicate_to_year(template_id: str, payload: DuplicateTemplateRequest, store: Store = Depends(get_store)):
    template = get_template(template_id, store)
    if selectors.find_by_id(store.state.school_years, payload.school_year_id) is None:
        raise HTTPException(status_code=404, detail="School year not found")
    if payload.school_year_id == template.school_year_id:
        raise HTTPException(status_code=400, detail="Template already belongs to this school year")

    copy = duplicate_template(template, payload.school_year_id)
    store.add_assessment_template(copy)
    return copy
