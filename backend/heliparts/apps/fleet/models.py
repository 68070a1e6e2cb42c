"""
Fleet data models.

Helicopter CRUD (create, edit, retire) is handled by the wider platform;
this service reads helicopters to validate installations and to label
ledger history.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)

from ...database import Base


class Helicopter(Base):
    """
    Master record for each helicopter in the fleet.

    - tail_number:
        Registration mark painted on the airframe (e.g. 'N407HP'); the
        display label used throughout the parts tracker.
    - status:
        Operational status, 'active' by default.
    """

    __tablename__ = "helicopters"
    __table_args__ = (
        Index("ix_helicopters_status", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    tail_number = Column(String(20), unique=True, nullable=False, index=True)
    model = Column(String(64), nullable=True)
    manufacturer = Column(String(64), nullable=True)
    year = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="active")
    notes = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
