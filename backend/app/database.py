import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- USERS
-- ============================================================
CREATE TABLE IF NOT EXISTS users (
    id                  TEXT PRIMARY KEY,
    email               TEXT NOT NULL UNIQUE,
    password_hash       TEXT,
    first_name          TEXT NOT NULL,
    last_name           TEXT NOT NULL,
    role                TEXT NOT NULL DEFAULT 'EMPLOYEE'
                        CHECK(role IN ('EMPLOYEE','MANAGER','HR_MANAGER','ADMIN')),
    status              TEXT NOT NULL DEFAULT 'PENDING'
                        CHECK(status IN ('ACTIVE','INACTIVE','SUSPENDED','PENDING')),
    profile_picture_url TEXT,
    created_at          TEXT NOT NULL
);

-- ============================================================
-- EMPLOYEES
-- ============================================================
CREATE TABLE IF NOT EXISTS employees (
    id         TEXT PRIMARY KEY,
    user_id    TEXT NOT NULL UNIQUE REFERENCES users(id),
    position   TEXT NOT NULL,
    status     TEXT NOT NULL DEFAULT 'ACTIVE',
    created_at TEXT NOT NULL
);

-- ============================================================
-- LEAVE REQUESTS
-- ============================================================
CREATE TABLE IF NOT EXISTS leave_requests (
    id          TEXT PRIMARY KEY,
    employee_id TEXT NOT NULL REFERENCES employees(id),
    start_date  TEXT NOT NULL,
    end_date    TEXT NOT NULL,
    reason      TEXT,
    status      TEXT NOT NULL DEFAULT 'PENDING'
                CHECK(status IN ('PENDING','APPROVED','REJECTED','CANCELLED')),
    created_at  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_leave_requests_employee ON leave_requests(employee_id);

-- ============================================================
-- DOCUMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS documents (
    id                     TEXT PRIMARY KEY,
    leave_request_id       TEXT NOT NULL REFERENCES leave_requests(id),
    external_media_id      TEXT NOT NULL,
    external_media_url     TEXT NOT NULL,
    external_resource_type TEXT,
    file_name              TEXT,
    mime_type              TEXT,
    file_size_bytes        INTEGER,
    uploaded_by_id         TEXT NOT NULL REFERENCES users(id),
    created_at             TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_documents_leave_request ON documents(leave_request_id, created_at);
CREATE UNIQUE INDEX IF NOT EXISTS idx_documents_external_id ON documents(external_media_id);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    conn.close()
