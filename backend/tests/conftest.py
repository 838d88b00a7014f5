import time
import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.database import get_db
from app.dependencies import get_media_store
from app.main import app
from app.models.leave_request import LeaveRequest
from app.services.auth_service import create_user
from app.services.media_store import (
    MediaDeleteError,
    MediaUploadError,
    MediaUploadResult,
    UploadSignature,
    generate_external_id,
)
from app.utils.security import create_access_token


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class FakeMediaStore:
    """In-memory stand-in for the Cloudinary client."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.uploads: list[tuple[str, str]] = []  # (external_id, destination)
        self.deleted: list[str] = []
        self.fail_uploads = False
        self.fail_deletes = False
        self.upload_delay = 0.0  # seconds, simulates a slow network round trip

    def upload(self, content, mime_type, destination="general"):
        if self.fail_uploads:
            raise MediaUploadError("quota exceeded")
        if self.upload_delay:
            time.sleep(self.upload_delay)
        external_id = f"leave-management-system/{destination}/{generate_external_id()}"
        self.objects[external_id] = content
        self.uploads.append((external_id, destination))
        kind = "image" if mime_type.startswith("image/") else "raw"
        return MediaUploadResult(
            external_id=external_id,
            url=f"https://res.cloudinary.com/demo/{kind}/upload/v1/{external_id}",
            format=mime_type.split("/")[-1],
            resource_type=kind,
            byte_size=len(content),
        )

    def delete(self, external_id, resource_type=None):
        if self.fail_deletes:
            raise MediaDeleteError(external_id, "service unavailable")
        self.deleted.append(external_id)
        return "ok" if self.objects.pop(external_id, None) is not None else "not found"

    def transform_url(self, external_id, transformations=None):
        return f"https://res.cloudinary.com/demo/image/upload/{external_id}"

    def generate_thumbnail_url(self, external_id, resource_type=None):
        if resource_type == "image":
            return f"https://res.cloudinary.com/demo/image/upload/c_fill,h_200,w_200/{external_id}"
        return f"https://via.placeholder.com/200x200/cccccc/666666?text={(resource_type or 'auto').upper()}"

    def generate_upload_signature(self, folder=None):
        return UploadSignature(
            signature="abc123",
            timestamp=1700000000,
            api_key="key",
            cloud_name="demo",
            folder=folder or "leave-management-system",
        )


@pytest.fixture
def tmp_data_dir(tmp_path):
    data_dir = tmp_path / "LeaveData"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def test_db(tmp_data_dir):
    db_path = tmp_data_dir / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    from app.database import init_db
    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def media_store():
    return FakeMediaStore()


@pytest.fixture
def client(test_db, media_store):
    app.dependency_overrides[get_media_store] = lambda: media_store
    c = TestClient(app)
    yield c


@pytest.fixture
def make_user(db):
    def _make_user(role="EMPLOYEE", position="Engineer", status="ACTIVE", password="correct-horse-42"):
        return create_user(
            db,
            email=f"{uuid.uuid4().hex[:8]}@example.com",
            password=password,
            first_name="Test",
            last_name=role.title(),
            role=role,
            status=status,
            position=position,
        )
    return _make_user


@pytest.fixture
def make_leave_request(db):
    def _make_leave_request(user):
        lr = LeaveRequest(
            id=str(uuid.uuid4()),
            employee_id=user.employee.id,
            start_date="2026-11-02",
            end_date="2026-11-06",
            reason="Medical",
            status="PENDING",
            created_at="2026-10-01T09:00:00.000000Z",
        )
        db.add(lr)
        db.commit()
        return lr
    return _make_leave_request


@pytest.fixture
def auth_headers():
    def _auth_headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}
    return _auth_headers
