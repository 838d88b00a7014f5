"""Cloudinary-backed media store.

All remote-store specifics live here. The rest of the app talks to the
`MediaStore` protocol: upload, delete, URL transformation and direct-upload
signatures.
"""
import base64
import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Protocol

import cloudinary.exceptions
import cloudinary.uploader
import cloudinary.utils

from app.config import MediaStoreConfig

logger = logging.getLogger("app.media_store")

# Applied by transform_url before any caller-supplied steps.
DEFAULT_THUMBNAIL_TRANSFORMATION = (
    {"width": 300, "height": 300, "crop": "fill", "gravity": "face"},
    {"quality": "auto:good"},
    {"fetch_format": "auto"},
)

PLACEHOLDER_URL = "https://via.placeholder.com/200x200/cccccc/666666?text={kind}"


class MediaStoreError(Exception):
    pass


class MediaUploadError(MediaStoreError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Failed to upload file: {reason}")


class MediaDeleteError(MediaStoreError):
    def __init__(self, external_id: str, reason: str):
        self.external_id = external_id
        self.reason = reason
        super().__init__(f"Failed to delete file {external_id}: {reason}")


@dataclass(frozen=True)
class DestinationProfile:
    name: str
    folder: str
    transformation: tuple[dict, ...] = field(default_factory=tuple)
    resource_type: str = "auto"


@dataclass(frozen=True)
class MediaUploadResult:
    external_id: str
    url: str
    format: str | None
    resource_type: str
    byte_size: int
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class UploadSignature:
    signature: str
    timestamp: int
    api_key: str
    cloud_name: str
    folder: str


def destination_profiles(root_folder: str) -> dict[str, DestinationProfile]:
    return {
        "general": DestinationProfile(
            name="general",
            folder=root_folder,
            transformation=({"quality": "auto:good"}, {"fetch_format": "auto"}),
        ),
        "profile_picture": DestinationProfile(
            name="profile_picture",
            folder=f"{root_folder}/profile-pictures",
            transformation=(
                {"width": 300, "height": 300, "crop": "fill", "gravity": "face"},
                {"quality": "auto:good"},
                {"fetch_format": "auto"},
            ),
        ),
        "document": DestinationProfile(
            name="document",
            folder=f"{root_folder}/documents",
            transformation=({"quality": "auto:good"},),
        ),
    }


def generate_external_id() -> str:
    """Millisecond clock plus a random suffix; unique without coordination."""
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"


class MediaStore(Protocol):
    def upload(self, content: bytes, mime_type: str, destination: str = "general") -> MediaUploadResult: ...

    def delete(self, external_id: str, resource_type: str | None = None) -> str: ...

    def transform_url(self, external_id: str, transformations: list[dict] | None = None) -> str: ...

    def generate_thumbnail_url(self, external_id: str, resource_type: str | None = None) -> str: ...

    def generate_upload_signature(self, folder: str | None = None) -> UploadSignature: ...


class CloudinaryMediaStore:
    def __init__(self, config: MediaStoreConfig):
        self.config = config
        self.profiles = destination_profiles(config.folder)

    def _credentials(self) -> dict:
        return {
            "cloud_name": self.config.cloud_name,
            "api_key": self.config.api_key,
            "api_secret": self.config.api_secret,
        }

    def profile(self, destination: str) -> DestinationProfile:
        try:
            return self.profiles[destination]
        except KeyError:
            raise ValueError(f"Unknown destination profile: {destination}") from None

    def upload(self, content: bytes, mime_type: str, destination: str = "general") -> MediaUploadResult:
        profile = self.profile(destination)
        data_uri = f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"
        try:
            result = cloudinary.uploader.upload(
                data_uri,
                folder=profile.folder,
                public_id=generate_external_id(),
                resource_type=profile.resource_type,
                transformation=[dict(step) for step in profile.transformation],
                **self._credentials(),
            )
        except (cloudinary.exceptions.Error, OSError) as exc:
            logger.error("Upload to %s failed: %s", profile.folder, exc)
            raise MediaUploadError(str(exc)) from exc

        logger.info("Uploaded %s (%s bytes) to %s", result["public_id"], result.get("bytes"), profile.folder)
        return MediaUploadResult(
            external_id=result["public_id"],
            url=result["secure_url"],
            format=result.get("format"),
            resource_type=result.get("resource_type", "image"),
            byte_size=result.get("bytes", len(content)),
            width=result.get("width"),
            height=result.get("height"),
        )

    def delete(self, external_id: str, resource_type: str | None = None) -> str:
        """Remove a stored object. Returns the store's outcome ("ok", "not found")."""
        try:
            result = cloudinary.uploader.destroy(
                external_id,
                resource_type=resource_type or "image",
                **self._credentials(),
            )
        except (cloudinary.exceptions.Error, OSError) as exc:
            logger.error("Delete of %s failed: %s", external_id, exc)
            raise MediaDeleteError(external_id, str(exc)) from exc

        outcome = result.get("result", "unknown")
        logger.info("Deleted %s: %s", external_id, outcome)
        return outcome

    def transform_url(self, external_id: str, transformations: list[dict] | None = None) -> str:
        steps = [dict(step) for step in DEFAULT_THUMBNAIL_TRANSFORMATION]
        steps.extend(dict(step) for step in transformations or [])
        url, _ = cloudinary.utils.cloudinary_url(
            external_id,
            transformation=steps,
            cloud_name=self.config.cloud_name,
            secure=True,
        )
        return url

    def generate_thumbnail_url(self, external_id: str, resource_type: str | None = None) -> str:
        if resource_type == "image":
            url, _ = cloudinary.utils.cloudinary_url(
                external_id,
                transformation=[{"width": 200, "height": 200, "crop": "fill"}, {"quality": "auto:good"}],
                cloud_name=self.config.cloud_name,
                secure=True,
            )
            return url
        return PLACEHOLDER_URL.format(kind=(resource_type or "auto").upper())

    def generate_upload_signature(self, folder: str | None = None) -> UploadSignature:
        folder = folder or self.config.folder
        timestamp = int(time.time())
        signature = cloudinary.utils.api_sign_request(
            {"timestamp": timestamp, "folder": folder},
            self.config.api_secret,
        )
        return UploadSignature(
            signature=signature,
            timestamp=timestamp,
            api_key=self.config.api_key,
            cloud_name=self.config.cloud_name,
            folder=folder,
        )


def external_id_from_url(url: str) -> str | None:
    """Recover the external id from a delivery URL (.../upload/v123/folder/name.jpg)."""
    parts = url.split("/")
    if "upload" not in parts:
        return None
    index = parts.index("upload")
    if index + 2 >= len(parts):
        return None
    folder_and_file = "/".join(parts[index + 2:])
    return folder_and_file.rsplit(".", 1)[0]
