"""Pre-network checks for uploaded files.

Each upload route names a profile (size cap, file-count cap, MIME allow-list).
Payloads that break a profile are rejected here, before the media store is
contacted.
"""
from dataclasses import dataclass

from starlette.datastructures import UploadFile

MB = 1024 * 1024
ANY_MIME_TYPE = "*/*"
IMAGE_MIME_TYPES = "image/*"

DOCUMENT_MIME_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "image/jpeg",
    "image/png",
    "image/gif",
    "text/plain",
)


class UploadRejected(Exception):
    status_code = 400


class DisallowedMimeType(UploadRejected):
    def __init__(self, mime_type: str, message: str | None = None):
        self.mime_type = mime_type
        super().__init__(message or f"File type {mime_type} is not allowed")


class FileTooLarge(UploadRejected):
    status_code = 413

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        super().__init__(f"File too large (max {max_bytes} bytes)")


class TooManyFiles(UploadRejected):
    def __init__(self, max_files: int, received: int):
        self.max_files = max_files
        self.received = received
        super().__init__(f"Too many files: received {received}, max {max_files}")


@dataclass(frozen=True)
class IncomingFile:
    filename: str | None
    mime_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class UploadProfile:
    name: str
    max_file_size: int
    max_files: int
    allowed_mime_types: tuple[str, ...] = (ANY_MIME_TYPE,)
    mime_error: str | None = None

    def allows(self, mime_type: str) -> bool:
        for allowed in self.allowed_mime_types:
            if allowed == ANY_MIME_TYPE or allowed == mime_type:
                return True
            if allowed == IMAGE_MIME_TYPES and mime_type.startswith("image/"):
                return True
        return False

    def check_mime_type(self, mime_type: str) -> None:
        if not self.allows(mime_type):
            raise DisallowedMimeType(mime_type, self.mime_error)

    def check_size(self, size: int) -> None:
        if size > self.max_file_size:
            raise FileTooLarge(self.max_file_size)

    def check_count(self, count: int) -> None:
        if count > self.max_files:
            raise TooManyFiles(self.max_files, count)

    def check(self, files: list[IncomingFile]) -> None:
        self.check_count(len(files))
        for f in files:
            self.check_mime_type(f.mime_type)
            self.check_size(f.size)


PROFILE_PICTURE_PROFILE = UploadProfile(
    name="profile-picture",
    max_file_size=5 * MB,
    max_files=1,
    allowed_mime_types=(IMAGE_MIME_TYPES,),
    mime_error="Only image files are allowed for profile pictures",
)

DOCUMENT_PROFILE = UploadProfile(
    name="document",
    max_file_size=10 * MB,
    max_files=5,
    allowed_mime_types=DOCUMENT_MIME_TYPES,
)

IMAGE_PROFILE = UploadProfile(
    name="image",
    max_file_size=5 * MB,
    max_files=1,
    allowed_mime_types=(IMAGE_MIME_TYPES,),
    mime_error="Only image files are allowed",
)


def custom_profile(
    max_file_size: int = 10 * MB,
    max_files: int = 1,
    allowed_mime_types: tuple[str, ...] = (ANY_MIME_TYPE,),
    name: str = "custom",
) -> UploadProfile:
    return UploadProfile(
        name=name,
        max_file_size=max_file_size,
        max_files=max_files,
        allowed_mime_types=tuple(allowed_mime_types),
    )


async def read_upload(upload: UploadFile, profile: UploadProfile) -> IncomingFile:
    """Read a multipart file into memory, enforcing the profile as bytes arrive."""
    mime_type = upload.content_type or "application/octet-stream"
    profile.check_mime_type(mime_type)

    size = 0
    chunks: list[bytes] = []
    while True:
        chunk = await upload.read(1024 * 1024)
        if not chunk:
            break
        size += len(chunk)
        profile.check_size(size)
        chunks.append(chunk)

    return IncomingFile(filename=upload.filename, mime_type=mime_type, content=b"".join(chunks))
