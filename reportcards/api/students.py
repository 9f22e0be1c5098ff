from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from reportcards.api.deps import get_document_service, get_store
from reportcards.schemas.assessments import AssessmentTemplate
from reportcards.schemas.students import DocumentType, Student, StudentUpdate
from reportcards.schemas.views import OkResponse, StudentDocuments
from reportcards.services.documents import AttachmentError, AttachmentTooLargeError, DocumentService
from reportcards.store import selectors
from reportcards.store.store import Store

router = APIRouter(prefix="/students", tags=["students"])


@router.get("", response_model=list[Student])
def list_students(
    active: bool = Query(default=True),
    grade_id: str | None = Query(default=None, alias="gradeId"),
    search: str | None = Query(default=None),
    store: Store = Depends(get_store),
):
    students = selectors.active_students(store.state) if active else store.state.students
    if grade_id:
        students = [student for student in students if student.grade_id == grade_id]
    if search:
        needle = search.lower()
        students = [
            student
            for student in students
            if needle in f"{student.first_name} {student.last_name} {student.name_used or ''}".lower()
        ]
    return students


@router.post("", response_model=Student)
def create_student(payload: Student, store: Store = Depends(get_store)):
    store.add_student(payload)
    return payload


@router.get("/{student_id}", response_model=Student)
def get_student(student_id: str, store: Store = Depends(get_store)):
    student = selectors.find_by_id(store.state.students, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


@router.patch("/{student_id}", response_model=OkResponse)
def update_student(student_id: str, payload: StudentUpdate, store: Store = Depends(get_store)):
    store.update_student(student_id, payload)
    return OkResponse()


@router.delete("/{student_id}", response_model=OkResponse)
def delete_student(student_id: str, store: Store = Depends(get_store)):
    store.delete_student(student_id)
    return OkResponse()


@router.get("/{student_id}/templates", response_model=list[AssessmentTemplate])
def student_templates(student_id: str, store: Store = Depends(get_store)):
    student = get_student(student_id, store)
    return selectors.templates_for_student(store.state, student)


@router.get("/{student_id}/documents", response_model=StudentDocuments)
def student_documents(student_id: str, store: Store = Depends(get_store)):
    return selectors.student_documents(store.state, student_id)


@router.post("/{student_id}/documents", response_model=StudentDocuments)
async def upload_document(
    student_id: str,
    label: str = Form(...),
    doc_type: DocumentType = Form(default="general", alias="type"),
    report_id: str | None = Form(default=None, alias="reportId"),
    comment: str | None = Form(default=None),
    document: UploadFile = File(...),
    store: Store = Depends(get_store),
    documents: DocumentService = Depends(get_document_service),
):
    get_student(student_id, store)
    if doc_type == "report" and not report_id:
        raise HTTPException(status_code=400, detail="reportId is required for report documents")

    try:
        built = await documents.build_document(
            document,
            student_id=student_id,
            label=label,
            doc_type=doc_type,
            report_id=report_id,
            comment=comment,
        )
    except AttachmentTooLargeError as exc:
        raise HTTPException(status_code=413, detail=str(exc)) from exc
    except AttachmentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if built.type == "general":
        store.replace_general_document(built)
    else:
        store.add_document(built)
    return selectors.student_documents(store.state, student_id)


@router.delete("/{student_id}/documents/{document_id}", response_model=OkResponse)
def delete_document(student_id: str, document_id: str, store: Store = Depends(get_store)):
    document = selectors.find_by_id(store.state.documents, document_id)
    if document is not None and document.student_id == student_id:
        store.delete_document(document_id)
    return OkResponse()
