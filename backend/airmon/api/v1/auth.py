"""
auth.py — Registration and Login Endpoints (API Layer)

Purpose:
- Create accounts and issue JWT access tokens.
- Delegates hashing, uniqueness and e-mail checks to airmon.services.users,
  and token encoding to airmon.core.security.

Notes:
- Stateless JWT: logout is client-side only (delete the token).
- No rate limiting or lockout.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from airmon.api.v1.schemas import ProfileOut
from airmon.core.database import get_db
from airmon.core.errors import Unauthorized
from airmon.core.logging import get_logger
from airmon.core.security import create_access_token
from airmon.services import users

logger = get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)

# -----------------------------------------------------------------------------
# Request / Response Schemas
# -----------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    username: str
    email: str
    password: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None


class LoginRequest(BaseModel):
    """
    - `username`: username or e-mail address.
    - `password`: raw password supplied by the user.
    """
    username: str
    password: str


class TokenResponse(BaseModel):
    """
    - `token`: encoded JWT, sent back as `Authorization: Bearer <token>`.
    """
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: ProfileOut


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.post("/register", status_code=201, response_model=TokenResponse)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    POST /auth/register

    Create a user and return a token for it. Duplicate username / e-mail,
    invalid e-mail or a short password → 400.
    """
    user = users.create_user(
        db,
        username=payload.username,
        email=payload.email,
        password=payload.password,
        firstName=payload.firstName,
        lastName=payload.lastName,
    )
    token = create_access_token({"sub": str(user.id)})
    return TokenResponse(token=token, user=ProfileOut(**users.to_profile(user)))


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    POST /auth/login

    1. Look up user by username or e-mail.
    2. Verify provided password against the stored hash.
    3. Valid → token; invalid → 401.
    """
    user = users.get_user_by_login(db, payload.username.strip())
    if user is None or not users.verify_user_password(user, payload.password):
        logger.info("Failed login for %s", payload.username)
        raise Unauthorized("Invalid credentials")

    token = create_access_token({"sub": str(user.id)})
    return TokenResponse(token=token, user=ProfileOut(**users.to_profile(user)))
