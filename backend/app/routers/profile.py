from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_media_store, profile_picture_upload
from app.models.user import User
from app.schemas.document import ActionEnvelope
from app.schemas.profile import ProfileEnvelope, ProfileResponse
from app.services.media_store import MediaStore, MediaStoreError
from app.services.profile_service import delete_profile_picture, update_profile_picture
from app.services.upload_gateway import IncomingFile

router = APIRouter(prefix="/profile", tags=["profile"])


def _profile_to_response(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        profile_picture_url=user.profile_picture_url,
        has_employee_record=user.employee is not None,
    )


@router.put("/picture", response_model=ProfileEnvelope)
async def put_profile_picture(
    user: User = Depends(get_current_user),
    picture: IncomingFile | None = Depends(profile_picture_upload),
    db: Session = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
):
    if picture is None:
        return JSONResponse(status_code=400, content={"success": False, "message": "No file uploaded", "error": None})
    try:
        user = await run_in_threadpool(update_profile_picture, db, user, picture, media_store)
    except MediaStoreError as exc:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Failed to upload profile picture", "error": str(exc)},
        )
    return ProfileEnvelope(message="Profile picture updated", data=_profile_to_response(user))


@router.delete("/picture", response_model=ActionEnvelope)
async def remove_profile_picture(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
):
    await run_in_threadpool(delete_profile_picture, db, user, media_store)
    return ActionEnvelope(message="Profile picture deleted successfully")
