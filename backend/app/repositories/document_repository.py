import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.models.document import Document
from app.models.employee import Employee
from app.models.leave_request import LeaveRequest


@dataclass(frozen=True)
class DocumentOwnership:
    """A document with the user who owns its leave request. Read-only."""
    document: Document
    uploaded_by_id: str
    leave_request_owner_id: str | None

    def permits(self, user_id: str) -> bool:
        return user_id in (self.uploaded_by_id, self.leave_request_owner_id)


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class DocumentRepository:
    def __init__(self, db: Session):
        self.db = db

    def leave_request_exists(self, leave_request_id: str) -> bool:
        found = self.db.execute(
            select(LeaveRequest.id).where(LeaveRequest.id == leave_request_id)
        ).first()
        return found is not None

    def create(
        self,
        leave_request_id: str,
        external_media_id: str,
        external_media_url: str,
        uploaded_by_id: str,
        external_resource_type: str | None = None,
        file_name: str | None = None,
        mime_type: str | None = None,
        file_size_bytes: int | None = None,
    ) -> Document:
        doc = Document(
            id=str(uuid.uuid4()),
            leave_request_id=leave_request_id,
            external_media_id=external_media_id,
            external_media_url=external_media_url,
            external_resource_type=external_resource_type,
            file_name=file_name,
            mime_type=mime_type,
            file_size_bytes=file_size_bytes,
            uploaded_by_id=uploaded_by_id,
            created_at=_now(),
        )
        self.db.add(doc)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(doc)
        return doc

    def find_by_id(self, document_id: str) -> Document | None:
        return (
            self.db.query(Document)
            .options(joinedload(Document.leave_request))
            .filter(Document.id == document_id)
            .first()
        )

    def find_by_leave_request(self, leave_request_id: str) -> list[Document]:
        return (
            self.db.query(Document)
            .filter(Document.leave_request_id == leave_request_id)
            .order_by(Document.created_at.desc())
            .all()
        )

    def find_ownership(self, document_id: str) -> DocumentOwnership | None:
        row = self.db.execute(
            select(Document, Employee.user_id)
            .join(LeaveRequest, LeaveRequest.id == Document.leave_request_id)
            .outerjoin(Employee, Employee.id == LeaveRequest.employee_id)
            .where(Document.id == document_id)
        ).first()
        if row is None:
            return None
        document, owner_id = row
        return DocumentOwnership(
            document=document,
            uploaded_by_id=document.uploaded_by_id,
            leave_request_owner_id=owner_id,
        )

    def delete(self, document: Document) -> None:
        self.db.delete(document)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
