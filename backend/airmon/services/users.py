"""
users.py — Credential Store

Purpose:
- Create and update user records.
- Own hash-on-write: every path that sets a password goes through
  `set_password`, so the stored value is always a bcrypt hash.
- Persist the per-user settings document (full overwrite, never merged).

Lookups return None when a user is absent; only creation-time validation
problems raise (`ValidationError`).
"""

from typing import Any, Dict, Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from airmon.core.errors import ValidationError
from airmon.core.logging import get_logger
from airmon.core.security import hash_password, verify_password
from airmon.models.user import User

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6

# API field name -> ORM attribute
PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "phone": "phone",
    "bio": "bio",
}


def set_password(user: User, raw_password: str) -> None:
    user.password = hash_password(raw_password)


def verify_user_password(user: User, candidate: str) -> bool:
    if not candidate:
        return False
    return verify_password(candidate, user.password)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_user_by_login(db: Session, login: str) -> Optional[User]:
    """Find a user by username or e-mail."""
    stmt = select(User).where(or_(User.username == login, User.email == login))
    return db.scalars(stmt).first()


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    **profile: Optional[str],
) -> User:
    """
    Insert a new user.

    Raises ValidationError for a bad e-mail, a short password or a
    username/e-mail that is already taken.
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username is required")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    try:
        email = validate_email(email or "", check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError("Invalid email address", error=str(e))

    taken = db.scalars(
        select(User).where(or_(User.username == username, User.email == email))
    ).first()
    if taken is not None:
        field = "Username" if taken.username == username else "Email"
        raise ValidationError(f"{field} is already registered")

    user = User(username=username, email=email)
    for api_name, attr in PROFILE_FIELDS.items():
        if profile.get(api_name):
            setattr(user, attr, profile[api_name])
    set_password(user, password)

    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration
        db.rollback()
        raise ValidationError("Username or email is already registered", error=str(e.orig))
    db.refresh(user)
    logger.info("Created user %s (id=%s)", user.username, user.id)
    return user


def update_user(db: Session, user_id: int, fields: Dict[str, Any]) -> Optional[User]:
    """
    Apply `fields` (API names, plus `password`) to a user.

    The password is re-hashed only when it is part of the update.
    Returns None if the user does not exist.
    """
    user = db.get(User, user_id)
    if user is None:
        return None

    for name, value in fields.items():
        if name == "password":
            set_password(user, value)
        elif name in PROFILE_FIELDS:
            setattr(user, PROFILE_FIELDS[name], value)
        else:
            raise ValueError(f"Unknown user field: {name}")

    db.commit()
    db.refresh(user)
    return user


def save_settings(db: Session, user_id: int, document: Dict[str, Any]) -> Optional[User]:
    """Replace the stored settings document. Last write wins."""
    user = db.get(User, user_id)
    if user is None:
        return None
    user.settings = document
    db.commit()
    return user


def get_settings(db: Session, user_id: int) -> Optional[Dict[str, Any]]:
    user = db.get(User, user_id)
    if user is None:
        return None
    return user.settings


def to_profile(user: User) -> Dict[str, Any]:
    """Non-sensitive view of a user; the password hash is never included."""
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phone": user.phone,
        "bio": user.bio,
        "memberSince": user.created_at,
    }
