"""
schemas.py — Shared response schemas

Field names follow the JSON contract (camelCase timestamps) through
serialization aliases; ORM objects are read via `from_attributes`.

Timestamps are stored in UTC. SQLite hands them back without tzinfo, so
naive values are tagged as UTC before they are serialized.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ReadingOut(BaseModel):
    """A stored sensor reading as returned to clients."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    sensor_id: str
    temperature: float
    humidity: float
    air_quality: int
    category: str
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    updated_at: datetime = Field(
        validation_alias=AliasChoices("updated_at", "updatedAt"),
        serialization_alias="updatedAt",
    )

    @field_validator("created_at", "updated_at")
    @classmethod
    def utc_timestamps(cls, v: datetime) -> datetime:
        return as_utc(v)


class ProfileOut(BaseModel):
    id: int
    username: str
    email: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    memberSince: datetime

    @field_validator("memberSince")
    @classmethod
    def utc_member_since(cls, v: datetime) -> datetime:
        return as_utc(v)
