import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.config import settings
from app.models.employee import Employee
from app.models.user import User
from app.utils.security import create_access_token, hash_password, verify_password

ROLES = ("EMPLOYEE", "MANAGER", "HR_MANAGER", "ADMIN")


def create_user(
    db: Session,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: str = "EMPLOYEE",
    status: str = "ACTIVE",
    position: str | None = None,
) -> User:
    """Create a user, plus an employee record when a position is given."""
    if role not in ROLES:
        raise ValueError(f"Invalid role. Must be one of: {ROLES}")
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    user = User(
        id=str(uuid.uuid4()),
        email=email.lower(),
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        status=status,
        created_at=now,
    )
    db.add(user)
    if position:
        db.add(Employee(id=str(uuid.uuid4()), user_id=user.id, position=position, created_at=now))
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> dict | None:
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or user.status != "ACTIVE":
        return None
    if not verify_password(user.password_hash, password):
        return None
    return {
        "access_token": create_access_token(user.id, user.role),
        "token_type": "bearer",
        "expires_in_seconds": settings.access_token_expire_minutes * 60,
    }
