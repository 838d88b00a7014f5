import logging

from sqlalchemy.orm import Session

from app.models.user import User
from app.services.media_store import MediaStore, MediaStoreError, external_id_from_url
from app.services.upload_gateway import IncomingFile

logger = logging.getLogger("app.profile")


def _remove_remote_picture(media_store: MediaStore, url: str) -> None:
    external_id = external_id_from_url(url)
    if not external_id:
        return
    try:
        media_store.delete(external_id, "image")
    except MediaStoreError as exc:
        logger.warning("Old profile picture %s left behind: %s", external_id, exc)


def update_profile_picture(db: Session, user: User, file: IncomingFile, media_store: MediaStore) -> User:
    """Upload a new picture and point the user at it. MediaStoreError propagates."""
    stored = media_store.upload(file.content, file.mime_type, destination="profile_picture")
    previous = user.profile_picture_url
    user.profile_picture_url = stored.url
    db.commit()
    db.refresh(user)
    if previous:
        _remove_remote_picture(media_store, previous)
    return user


def delete_profile_picture(db: Session, user: User, media_store: MediaStore) -> None:
    if not user.profile_picture_url:
        return
    _remove_remote_picture(media_store, user.profile_picture_url)
    user.profile_picture_url = None
    db.commit()
