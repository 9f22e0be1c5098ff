import base64

from fastapi import UploadFile

from reportcards.core.config import get_settings
from reportcards.schemas.students import DocumentType, StudentDocument


class AttachmentError(Exception):
    pass


class AttachmentTooLargeError(AttachmentError):
    pass


GENERAL_DOC_SLOTS: dict[str, str] = {
    "passport": "Passport / ID",
    "previous_report": "Previous School Report",
    "medical": "Medical Information",
    "other": "Other",
}


def encode_attachment(content: bytes, content_type: str) -> str:
    """Inline data URL for ``content`` once it passes the size cap."""
    if not content:
        raise AttachmentError("File is empty")
    limit = get_settings().max_attachment_bytes
    if len(content) > limit:
        raise AttachmentTooLargeError(f"File is too large. Maximum size is {limit // 1024}KB.")
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class DocumentService:
    async def build_document(
        self,
        upload_file: UploadFile,
        *,
        student_id: str,
        label: str,
        doc_type: DocumentType = "general",
        report_id: str | None = None,
        comment: str | None = None,
    ) -> StudentDocument:
        limit = get_settings().max_attachment_bytes
        # read one byte past the cap so oversized uploads are never held in full
        content = await upload_file.read(limit + 1)
        content_type = upload_file.content_type or "application/octet-stream"
        return StudentDocument(
            student_id=student_id,
            type=doc_type,
            report_id=report_id,
            label=GENERAL_DOC_SLOTS.get(label, label),
            comment=comment,
            file_name=upload_file.filename or "file",
            file_type=content_type,
            file_data=encode_attachment(content, content_type),
        )
