# backend/heliparts/apps/accounts/models.py

from __future__ import annotations

import enum
import secrets
import string
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    String,
    Index,
)

from heliparts.database import Base

_USER_ID_ALPHABET = string.ascii_uppercase + string.digits


def generate_user_id() -> str:
    # Column default: called with no arguments, e.g. "USR-1F2A9C3D".
    block = "".join(secrets.choice(_USER_ID_ALPHABET) for _ in range(8))
    return f"USR-{block}"


class AccountRole(str, enum.Enum):
    """High-level roles used across the parts tracker."""

    ADMIN = "ADMIN"           # manages users, may correct stock counts
    MECHANIC = "MECHANIC"     # installs / removes parts
    USER = "USER"             # default account created by registration
    VIEW_ONLY = "VIEW_ONLY"


class User(Base):
    """
    Acting user for every mutating call.

    `username` is the display name shown in installation records and the
    stock transaction history.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_role_active", "role", "is_active"),
    )

    id = Column(
        String(36),
        primary_key=True,
        default=generate_user_id,
    )

    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=True)

    role = Column(
        Enum(AccountRole, name="account_role_enum"),
        nullable=False,
        default=AccountRole.USER,
        index=True,
    )

    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<User id={self.id} username={self.username} role={self.role}>"
