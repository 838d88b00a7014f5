"""Leave-request document workflow.

Upload runs validate -> store remotely -> persist. Nothing spans the remote
upload and the database write, so a failed insert leaves the uploaded object
orphaned in the media store.

Every operation returns a `DocumentResult`; media store and database errors
are converted to an error kind rather than raised.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from app.repositories.document_repository import DocumentRepository
from app.services.media_store import MediaStore, MediaStoreError
from app.services.upload_gateway import IncomingFile
from app.utils.filesystem import sanitize_filename

logger = logging.getLogger("app.documents")


class DocumentErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    UPLOAD_FAILED = "upload_failed"
    PERSIST_FAILED = "persist_failed"
    LOOKUP_FAILED = "lookup_failed"


@dataclass
class DocumentResult:
    success: bool
    data: Any = None
    error: DocumentErrorKind | None = None
    message: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> "DocumentResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: DocumentErrorKind, message: str) -> "DocumentResult":
        return cls(success=False, error=error, message=message)


class DocumentService:
    def __init__(self, repository: DocumentRepository, media_store: MediaStore):
        self.repository = repository
        self.media_store = media_store

    def upload_document(self, file: IncomingFile, leave_request_id: str, uploader_id: str) -> DocumentResult:
        try:
            exists = self.repository.leave_request_exists(leave_request_id)
        except SQLAlchemyError as exc:
            return DocumentResult.fail(DocumentErrorKind.LOOKUP_FAILED, f"Failed to upload document: {exc}")
        if not exists:
            return DocumentResult.fail(DocumentErrorKind.NOT_FOUND, "Leave request not found")

        try:
            stored = self.media_store.upload(file.content, file.mime_type, destination="document")
        except MediaStoreError as exc:
            return DocumentResult.fail(DocumentErrorKind.UPLOAD_FAILED, str(exc))

        try:
            document = self.repository.create(
                leave_request_id=leave_request_id,
                external_media_id=stored.external_id,
                external_media_url=stored.url,
                uploaded_by_id=uploader_id,
                external_resource_type=stored.resource_type,
                file_name=sanitize_filename(file.filename),
                mime_type=file.mime_type,
                file_size_bytes=stored.byte_size,
            )
        except SQLAlchemyError as exc:
            logger.error(
                "Document record for %s not saved, remote object %s is orphaned: %s",
                leave_request_id, stored.external_id, exc,
            )
            return DocumentResult.fail(DocumentErrorKind.PERSIST_FAILED, f"Failed to save document: {exc}")

        logger.info("Document %s attached to leave request %s", document.id, leave_request_id)
        return DocumentResult.ok(document)

    def get_document(self, document_id: str) -> DocumentResult:
        try:
            document = self.repository.find_by_id(document_id)
        except SQLAlchemyError as exc:
            return DocumentResult.fail(DocumentErrorKind.LOOKUP_FAILED, f"Failed to get document: {exc}")
        if document is None:
            return DocumentResult.fail(DocumentErrorKind.NOT_FOUND, "Document not found")
        return DocumentResult.ok(document)

    def get_documents_by_leave_request(self, leave_request_id: str) -> DocumentResult:
        try:
            documents = self.repository.find_by_leave_request(leave_request_id)
        except SQLAlchemyError as exc:
            return DocumentResult.fail(DocumentErrorKind.LOOKUP_FAILED, f"Failed to get documents: {exc}")
        return DocumentResult.ok(documents)

    def get_thumbnail_url(self, document_id: str) -> DocumentResult:
        result = self.get_document(document_id)
        if not result.success:
            return result
        document = result.data
        url = self.media_store.generate_thumbnail_url(
            document.external_media_id, document.external_resource_type
        )
        return DocumentResult.ok(url)

    def delete_document(self, document_id: str, requester_id: str) -> DocumentResult:
        try:
            ownership = self.repository.find_ownership(document_id)
        except SQLAlchemyError as exc:
            return DocumentResult.fail(DocumentErrorKind.LOOKUP_FAILED, f"Failed to delete document: {exc}")
        if ownership is None:
            return DocumentResult.fail(DocumentErrorKind.NOT_FOUND, "Document not found")
        if not ownership.permits(requester_id):
            return DocumentResult.fail(DocumentErrorKind.UNAUTHORIZED, "Unauthorized to delete this document")

        document = ownership.document
        # Remote cleanup is best effort; the record is removed either way.
        try:
            self.media_store.delete(document.external_media_id, document.external_resource_type)
        except MediaStoreError as exc:
            logger.warning("Remote copy of document %s left behind: %s", document.id, exc)

        try:
            self.repository.delete(document)
        except SQLAlchemyError as exc:
            return DocumentResult.fail(DocumentErrorKind.PERSIST_FAILED, f"Failed to delete document: {exc}")

        logger.info("Document %s deleted by %s", document_id, requester_id)
        return DocumentResult.ok()
