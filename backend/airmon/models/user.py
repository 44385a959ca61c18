"""
user.py — ORM Model for Application Users

Purpose:
- Represent authenticated users of the system and their profile.
- Stores hashed passwords only — never raw. Hashing is done by
  airmon.services.users.set_password on every write that touches `password`.
- Keeps a free-form settings document serialized as JSON text.

Used by:
- airmon.core.security (bearer-token gate)
- airmon.services.users (credential store)
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from airmon.core.database import Base, utcnow


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Authentication fields
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    password: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile
    first_name: Mapped[Optional[str]] = mapped_column("firstName", String(50), nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column("lastName", String(50), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Raw JSON text; use the `settings` property
    settings_json: Mapped[Optional[str]] = mapped_column("settings", Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        "createdAt", DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def settings(self) -> Dict[str, Any]:
        if not self.settings_json:
            return {}
        return json.loads(self.settings_json)

    @settings.setter
    def settings(self, value: Dict[str, Any]) -> None:
        self.settings_json = json.dumps(value)

    def __repr__(self) -> str:
        return f"<User {self.username}>"
