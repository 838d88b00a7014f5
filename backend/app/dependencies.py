from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from app.database import get_db
from app.models.user import User
from app.repositories.document_repository import DocumentRepository
from app.services.document_service import DocumentService
from app.services.media_store import MediaStore
from app.services.upload_gateway import (
    DOCUMENT_PROFILE,
    PROFILE_PICTURE_PROFILE,
    IncomingFile,
    UploadProfile,
    read_upload,
)
from app.utils.security import decode_access_token

ALL_ROLES = ("EMPLOYEE", "MANAGER", "HR_MANAGER", "ADMIN")


async def get_current_user(
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
) -> User:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="No token provided")
    token = authorization[7:]
    try:
        claims = decode_access_token(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = db.query(User).filter(User.id == claims["sub"]).first()
    if not user or user.status != "ACTIVE":
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def require_roles(*roles: str):
    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=403,
                detail="Access denied: You do not have the required permissions",
            )
        return user

    return _check


def get_media_store(request: Request) -> MediaStore:
    return request.app.state.media_store


def get_document_service(
    db: Session = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
) -> DocumentService:
    return DocumentService(DocumentRepository(db), media_store)


async def _single_upload(request: Request, field: str, profile: UploadProfile) -> IncomingFile | None:
    # UploadRejected propagates to the app-level handler.
    form = await request.form()
    files = [value for _, value in form.multi_items() if isinstance(value, UploadFile)]
    profile.check_count(len(files))
    upload = form.get(field)
    if not isinstance(upload, UploadFile):
        return None
    return await read_upload(upload, profile)


async def document_upload(request: Request) -> IncomingFile | None:
    return await _single_upload(request, "document", DOCUMENT_PROFILE)


async def profile_picture_upload(request: Request) -> IncomingFile | None:
    return await _single_upload(request, "profilePicture", PROFILE_PICTURE_PROFILE)
