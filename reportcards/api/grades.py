from fastapi import APIRouter, Depends, HTTPException

from reportcards.api.deps import get_store
from reportcards.schemas.school import Grade, GradeUpdate, TeacherAssignment
from reportcards.schemas.views import GradeOverviewItem, OkResponse
from reportcards.store import selectors
from reportcards.store.store import Store

router = APIRouter(prefix="/grades", tags=["grades"])


@router.get("", response_model=list[Grade])
def list_grades(store: Store = Depends(get_store)):
    return selectors.sorted_grades(store.state)


@router.post("", response_model=Grade)
def create_grade(payload: Grade, store: Store = Depends(get_store)):
    if "order" not in payload.model_fields_set:
        payload = payload.model_copy(update={"order": len(store.state.grades)})
    store.add_grade(payload)
    return payload


@router.get("/overview", response_model=list[GradeOverviewItem])
def grades_overview(store: Store = Depends(get_store)):
    return selectors.grade_overview(store.state)


@router.get("/{grade_id}", response_model=Grade)
def get_grade(grade_id: str, store: Store = Depends(get_store)):
    grade = selectors.find_by_id(store.state.grades, grade_id)
    if grade is None:
        raise HTTPException(status_code=404, detail="Grade not found")
    return grade


@router.get("/{grade_id}/teachers", response_model=dict[str, list[TeacherAssignment]])
def grade_teachers(grade_id: str, store: Store = Depends(get_store)):
    grade = get_grade(grade_id, store)
    return selectors.group_by_category(grade.teacher_assignments)


@router.patch("/{grade_id}", response_model=OkResponse)
def update_grade(grade_id: str, payload: GradeUpdate, store: Store = Depends(get_store)):
    store.update_grade(grade_id, payload)
    return OkResponse()


@router.delete("/{grade_id}", response_model=OkResponse)
def delete_grade(grade_id: str, store: Store = Depends(get_store)):
    store.delete_grade(grade_id)
    return OkResponse()
