from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from reportcards.api.deps import get_store
from reportcards.schemas.school import SchoolYear, SchoolYearUpdate
from reportcards.schemas.views import OkResponse
from reportcards.store.selectors import find_by_id
from reportcards.store.store import Store

router = APIRouter(prefix="/school-years", tags=["school-years"])


@router.get("", response_model=list[SchoolYear])
def list_school_years(store: Store = Depends(get_store)):
    return sorted(store.state.school_years, key=lambda year: year.start_year)


@router.post("", response_model=SchoolYear)
def create_school_year(payload: SchoolYear, store: Store = Depends(get_store)):
    store.add_school_year(payload)
    return find_by_id(store.state.school_years, payload.id)


@router.get("/active", response_model=SchoolYear)
def active_school_year(store: Store = Depends(get_store)):
    year = find_by_id(store.state.school_years, store.state.active_school_year_id)
    if year is None:
        raise HTTPException(status_code=404, detail="No active school year")
    return year


@router.patch("/{year_id}", response_model=OkResponse)
def update_school_year(year_id: str, payload: SchoolYearUpdate, store: Store = Depends(get_store)):
    try:
        store.update_school_year(year_id, payload)
    except ValidationError as exc:
        # a one-sided change can still invert the year range
        detail = [{"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]} for error in exc.errors()]
        raise HTTPException(status_code=422, detail=detail) from exc
    return OkResponse()


@router.post("/{year_id}/activate", response_model=OkResponse)
def activate_school_year(year_id: str, store: Store = Depends(get_store)):
    if find_by_id(store.state.school_years, year_id) is None:
        raise HTTPException(status_code=404, detail="School year not found")
    store.set_active_school_year(year_id)
    return OkResponse()
