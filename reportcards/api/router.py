from fastapi import APIRouter

from reportcards.api import (
    app_settings,
    dashboard,
    grades,
    reports,
    rewrite,
    school_years,
    shared,
    students,
    system,
    templates,
)

api_router = APIRouter()
api_router.include_router(system.router)
api_router.include_router(dashboard.router)
api_router.include_router(school_years.router)
api_router.include_router(grades.router)
api_router.include_router(templates.router)
api_router.include_router(students.router)
api_router.include_router(reports.router)
api_router.include_router(shared.router)
api_router.include_router(app_settings.router)
api_router.include_router(rewrite.router)
