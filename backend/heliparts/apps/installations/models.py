from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from heliparts.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls) -> list:
    return [member.value for member in enum_cls]


class InstallationStatusEnum(str, enum.Enum):
    ACTIVE = "active"
    REMOVED = "removed"


class PartInstallation(Base):
    """
    A quantity of one part fitted to one helicopter.

    Created ACTIVE by an install and moved to REMOVED exactly once. The
    quantity and the installing user never change after creation.
    """

    __tablename__ = "part_installations"
    __table_args__ = (
        CheckConstraint("quantity_installed > 0", name="ck_part_installations_quantity_positive"),
        Index("ix_part_installations_helicopter_status", "helicopter_id", "status"),
        Index("ix_part_installations_part_status", "part_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    part_id = Column(Integer, ForeignKey("parts.id", ondelete="RESTRICT"), nullable=False, index=True)
    helicopter_id = Column(Integer, ForeignKey("helicopters.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity_installed = Column(Integer, nullable=False, default=1)

    status = Column(
        SAEnum(
            InstallationStatusEnum,
            name="installation_status_enum",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=InstallationStatusEnum.ACTIVE,
        index=True,
    )

    installed_by_user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    removed_by_user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    installation_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    removed_date = Column(DateTime(timezone=True), nullable=True)

    serial_number = Column(String(64), nullable=True)
    hours_at_installation = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    part = relationship("Part", lazy="joined")
    helicopter = relationship("Helicopter", lazy="joined")
    installed_by = relationship("User", foreign_keys=[installed_by_user_id], lazy="joined")
    removed_by = relationship("User", foreign_keys=[removed_by_user_id], lazy="joined")
