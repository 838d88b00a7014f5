from dataclasses import asdict

from fastapi import APIRouter, Depends

from app.dependencies import ALL_ROLES, get_media_store, require_roles
from app.schemas.media import UploadSignatureEnvelope, UploadSignatureResponse
from app.services.media_store import MediaStore

router = APIRouter(
    prefix="/media",
    tags=["media"],
    dependencies=[Depends(require_roles(*ALL_ROLES))],
)


@router.get("/upload-signature", response_model=UploadSignatureEnvelope)
async def upload_signature(folder: str | None = None, media_store: MediaStore = Depends(get_media_store)):
    """Signed parameters for uploading straight to the media store."""
    signature = media_store.generate_upload_signature(folder)
    return UploadSignatureEnvelope(data=UploadSignatureResponse(**asdict(signature)))
