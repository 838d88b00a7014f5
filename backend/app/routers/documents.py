import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.dependencies import ALL_ROLES, document_upload, get_document_service, require_roles
from app.models.document import Document
from app.models.user import User
from app.schemas.document import (
    ActionEnvelope,
    DocumentEnvelope,
    DocumentListEnvelope,
    DocumentResponse,
    LeaveRequestSummary,
    ThumbnailData,
    ThumbnailEnvelope,
)
from app.services.document_service import DocumentErrorKind, DocumentResult, DocumentService
from app.services.upload_gateway import IncomingFile

router = APIRouter(prefix="/documents", tags=["documents"])

STATUS_BY_ERROR = {
    DocumentErrorKind.NOT_FOUND: 404,
    DocumentErrorKind.UNAUTHORIZED: 403,
}


def _failure(result: DocumentResult, message: str, status_code: int | None = None) -> JSONResponse:
    status = status_code or STATUS_BY_ERROR.get(result.error, 400)
    return JSONResponse(
        status_code=status,
        content={
            "success": False,
            "message": message,
            "error": result.message,
            "kind": result.error.value if result.error else None,
        },
    )


def _doc_to_response(doc: Document, with_leave_request: bool = False) -> DocumentResponse:
    leave_request = None
    if with_leave_request and doc.leave_request is not None:
        lr = doc.leave_request
        leave_request = LeaveRequestSummary(
            id=lr.id,
            employee_id=lr.employee_id,
            start_date=lr.start_date,
            end_date=lr.end_date,
            status=lr.status,
        )
    return DocumentResponse(
        id=doc.id,
        leave_request_id=doc.leave_request_id,
        external_media_id=doc.external_media_id,
        external_media_url=doc.external_media_url,
        external_resource_type=doc.external_resource_type,
        file_name=doc.file_name,
        mime_type=doc.mime_type,
        file_size_bytes=doc.file_size_bytes,
        uploaded_by_id=doc.uploaded_by_id,
        created_at=doc.created_at,
        leave_request=leave_request,
    )


@router.post("/upload/{leave_request_id}", response_model=DocumentEnvelope, status_code=201)
async def upload_document(
    leave_request_id: uuid.UUID,
    user: User = Depends(require_roles(*ALL_ROLES)),
    document: IncomingFile | None = Depends(document_upload),
    service: DocumentService = Depends(get_document_service),
):
    if document is None:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "No file uploaded", "error": None, "kind": None},
        )

    result = await run_in_threadpool(service.upload_document, document, str(leave_request_id), user.id)
    if not result.success:
        # Every upload failure, including a missing leave request, is a 400.
        return _failure(result, "Failed to upload document", status_code=400)
    return DocumentEnvelope(message="Document uploaded successfully", data=_doc_to_response(result.data))


@router.get("/leave-request/{leave_request_id}", response_model=DocumentListEnvelope)
async def list_documents_for_leave_request(
    leave_request_id: uuid.UUID,
    _user: User = Depends(require_roles(*ALL_ROLES)),
    service: DocumentService = Depends(get_document_service),
):
    result = service.get_documents_by_leave_request(str(leave_request_id))
    if not result.success:
        return _failure(result, "Failed to get documents")
    return DocumentListEnvelope(data=[_doc_to_response(d) for d in result.data])


@router.get("/{document_id}", response_model=DocumentEnvelope)
async def get_document(
    document_id: uuid.UUID,
    _user: User = Depends(require_roles(*ALL_ROLES)),
    service: DocumentService = Depends(get_document_service),
):
    result = service.get_document(str(document_id))
    if not result.success:
        return _failure(result, "Document not found")
    return DocumentEnvelope(data=_doc_to_response(result.data, with_leave_request=True))


@router.get("/{document_id}/thumbnail", response_model=ThumbnailEnvelope)
async def get_document_thumbnail(
    document_id: uuid.UUID,
    _user: User = Depends(require_roles(*ALL_ROLES)),
    service: DocumentService = Depends(get_document_service),
):
    result = await run_in_threadpool(service.get_thumbnail_url, str(document_id))
    if not result.success:
        return _failure(result, "Document not found")
    return ThumbnailEnvelope(data=ThumbnailData(url=result.data))


@router.delete("/{document_id}", response_model=ActionEnvelope)
async def delete_document(
    document_id: uuid.UUID,
    user: User = Depends(require_roles("HR_MANAGER", "ADMIN")),
    service: DocumentService = Depends(get_document_service),
):
    result = await run_in_threadpool(service.delete_document, str(document_id), user.id)
    if not result.success:
        return _failure(result, "Failed to delete document")
    return ActionEnvelope(message="Document deleted successfully")
