"""
security.py — Authentication Utilities (Password Hashing, JWT, Request Gates)

Purpose:
- Hash & verify passwords (never store raw passwords).
- Issue and validate JWT access tokens for authentication.
- Provide the two request gates used by the routers:
    * `get_current_user` → bearer token in the Authorization header
    * `require_api_key`  → static shared key sent by sensor devices

Key Constraints:
- Access tokens only (no refresh tokens). Logout is client-side.
- One API key for all ingestion traffic; no per-device keys.
- No rate limiting or lockout.

This module does NOT:
- Define API routes → see airmon/api/v1/*
"""

import datetime
import secrets
from typing import Any, Dict, Optional

from fastapi import Depends, Header, Query, Request
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from airmon.core.config import settings
from airmon.core.database import get_db
from airmon.core.errors import Unauthorized
from airmon.core.logging import get_logger
from airmon.models.user import User

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


# -----------------------------------------------------------------------------
# Password Hashing
# -----------------------------------------------------------------------------

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(raw_password: str) -> str:
    """
    Hash a plaintext password using bcrypt (salted, cost BCRYPT_ROUNDS).
    """
    return pwd_context.hash(raw_password)


def verify_password(raw_password: str, hashed_password: str) -> bool:
    """
    Verify that a raw password matches its hashed stored version.

    Returns False (instead of raising) when the stored value is not a
    recognizable hash.
    """
    try:
        return pwd_context.verify(raw_password, hashed_password)
    except (ValueError, TypeError):
        return False


# -----------------------------------------------------------------------------
# JWT Token Handling
# -----------------------------------------------------------------------------

def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[datetime.timedelta] = None,
) -> str:
    """
    Create a JWT access token with expiration.

    Expected payload format:
        data = {"sub": str(user_id)}
    """
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = datetime.timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    expire_at = datetime.datetime.now(datetime.timezone.utc) + expires_delta
    to_encode.update({"exp": expire_at})

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT token (signature + expiry).
    Returns the payload dict if valid, None if invalid.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


# -----------------------------------------------------------------------------
# Request Gates
# -----------------------------------------------------------------------------

def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the authenticated user from `Authorization: Bearer <token>`.

    Flow:
    - Extract the token after the `Bearer ` prefix.
    - Decode token (signature + expiry).
    - Lookup user by the `sub` claim.
    - Attach to request.state.user and return it.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthorized("No token, authorization denied")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthorized("No token, authorization denied")

    payload = decode_token(token)
    if payload is None:
        raise Unauthorized("Token is not valid")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise Unauthorized("Token is not valid")

    user = db.get(User, user_id)
    if user is None:
        logger.info("Token subject %s has no matching user", user_id)
        raise Unauthorized("Token is not valid")

    request.state.user = user
    return user


async def require_api_key(
    request: Request,
    api_key: Optional[str] = Query(None),
) -> None:
    """
    Gate for device ingestion: `api_key` in the JSON body or the query string
    must equal settings.API_KEY.
    """
    candidate = None
    try:
        body = await request.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        # Empty or null in the body falls through to the query string
        candidate = body.get("api_key") or None
    if candidate is None:
        candidate = api_key

    if not isinstance(candidate, str) or not secrets.compare_digest(
        candidate.encode("utf-8"), settings.API_KEY.encode("utf-8")
    ):
        raise Unauthorized("Invalid API key")
