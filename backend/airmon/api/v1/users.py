"""
users.py — Account Endpoints (API Layer)

Purpose:
- Profile read/update, password change, settings document, data retention
  pruning and data export for the signed-in user.
- Every route is bearer-token gated via `get_current_user`.

Response envelope: `{"success": true, ...}`. Failures are raised as
airmon.core.errors kinds and rendered by the app's exception handlers.

Known anomaly:
- /export-data bundles readings of the configured EXPORT_SENSOR_ID, not of
  a sensor that belongs to the caller (users do not own sensors yet).
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from airmon.api.v1.schemas import ProfileOut, ReadingOut
from airmon.core.config import settings
from airmon.core.database import get_db, utcnow
from airmon.core.errors import InternalError, NotFound, ServiceError, ValidationError
from airmon.core.logging import get_logger
from airmon.core.security import get_current_user
from airmon.models.user import User
from airmon.services import readings, users

logger = get_logger(__name__)

router = APIRouter(tags=["account"])

# -----------------------------------------------------------------------------
# Request / Response Schemas
# -----------------------------------------------------------------------------

class ProfileUpdate(BaseModel):
    """Required fields are checked after trimming, so they are optional here."""
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None


class PasswordChange(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class ClearOldDataRequest(BaseModel):
    days: int = Field(90, ge=0)


class ProfileResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    profile: ProfileOut


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class SettingsResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    settings: Dict[str, Any]


class ClearOldDataResponse(BaseModel):
    success: bool = True
    message: str
    deleted: int


class ExportBundle(BaseModel):
    user: ProfileOut
    sensorData: List[ReadingOut]
    exportedAt: datetime
    totalRecords: int


class ExportResponse(BaseModel):
    success: bool = True
    data: ExportBundle


def _strip(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


# -----------------------------------------------------------------------------
# Profile
# -----------------------------------------------------------------------------

@router.get("/profile", response_model=ProfileResponse)
def read_profile(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    GET /profile

    Non-sensitive profile fields plus `memberSince`.
    """
    user = users.get_user(db, current_user.id)
    if user is None:
        raise NotFound("User not found")
    return ProfileResponse(profile=ProfileOut(**users.to_profile(user)))


@router.post("/profile", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    POST /profile

    firstName / lastName are required (after trimming). phone / bio are
    applied only when non-empty after trimming.
    """
    first_name = _strip(payload.firstName)
    last_name = _strip(payload.lastName)
    if not first_name or not last_name:
        raise ValidationError("First name and last name are required")

    fields = {"firstName": first_name, "lastName": last_name}
    if _strip(payload.phone):
        fields["phone"] = _strip(payload.phone)
    if _strip(payload.bio):
        fields["bio"] = _strip(payload.bio)

    try:
        user = users.update_user(db, current_user.id, fields)
    except Exception as e:
        logger.error(f"Error updating profile for user {current_user.id}: {e}")
        raise InternalError("Error updating profile", error=str(e))
    if user is None:
        raise NotFound("User not found or no changes made")

    logger.info("Updated profile for user %s", user.id)
    return ProfileResponse(
        message="Profile updated successfully",
        profile=ProfileOut(**users.to_profile(user)),
    )


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    POST /change-password

    Verify the current password, then store the hash of the new one.
    """
    if not payload.currentPassword or not payload.newPassword:
        raise ValidationError("Current password and new password are required")
    if len(payload.newPassword) < users.MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"New password must be at least {users.MIN_PASSWORD_LENGTH} characters long"
        )

    try:
        user = users.get_user(db, current_user.id)
        if user is None:
            raise NotFound("User not found")

        if not users.verify_user_password(user, payload.currentPassword):
            raise ValidationError("Current password is incorrect")

        users.update_user(db, user.id, {"password": payload.newPassword})
    except ServiceError:
        raise
    except Exception as e:
        logger.error(f"Error changing password for user {current_user.id}: {e}")
        raise InternalError("Error changing password", error=str(e))

    logger.info("Password changed for user %s", current_user.id)
    return MessageResponse(message="Password updated successfully")


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------

@router.post("/settings", response_model=SettingsResponse)
def save_settings(
    document: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    POST /settings

    Replace the whole settings document with the request body.
    Nothing from the previous document is kept.
    """
    try:
        user = users.save_settings(db, current_user.id, document)
    except Exception as e:
        logger.error(f"Error saving settings for user {current_user.id}: {e}")
        raise InternalError("Error saving settings", error=str(e))
    if user is None:
        raise NotFound("User not found")

    logger.info("Saved settings for user %s (%d keys)", current_user.id, len(document))
    return SettingsResponse(message="Settings saved successfully", settings=document)


@router.get("/settings", response_model=SettingsResponse)
def read_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """
    GET /settings

    Stored settings document, `{}` when none has been saved.
    """
    stored = users.get_settings(db, current_user.id)
    if stored is None:
        raise NotFound("User not found")
    return SettingsResponse(settings=stored)


# -----------------------------------------------------------------------------
# Data management
# -----------------------------------------------------------------------------

@router.delete("/clear-old-data", response_model=ClearOldDataResponse)
def clear_old_data(
    payload: Optional[ClearOldDataRequest] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    DELETE /clear-old-data

    Delete every reading older than `days` days (default 90). Irreversible.
    """
    days = payload.days if payload is not None else ClearOldDataRequest().days
    try:
        cutoff = readings.window_start(days=days)
        logger.info(f"Clearing data older than {days} days (before {cutoff.isoformat()})")
        deleted = readings.delete_older_than(db, cutoff)
    except Exception as e:
        logger.error(f"Error clearing old data: {e}")
        raise InternalError("Error clearing old data", error=str(e))

    return ClearOldDataResponse(
        message=f"Successfully cleared {deleted} records older than {days} days",
        deleted=deleted,
    )


@router.get("/export-data", response_model=ExportResponse)
def export_data(
    limit: int = Query(1000, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    GET /export-data?limit=1000

    Bundle the caller's profile with up to `limit` readings (newest first)
    of settings.EXPORT_SENSOR_ID.
    """
    try:
        rows = readings.find_by_sensor(db, settings.EXPORT_SENSOR_ID, limit=limit)
        user = users.get_user(db, current_user.id)
    except Exception as e:
        logger.error(f"Error exporting data: {e}")
        raise InternalError("Error exporting data", error=str(e))
    if user is None:
        raise NotFound("User not found")

    bundle = ExportBundle(
        user=ProfileOut(**users.to_profile(user)),
        sensorData=[ReadingOut.model_validate(r) for r in rows],
        exportedAt=utcnow(),
        totalRecords=len(rows),
    )
    return ExportResponse(data=bundle)
