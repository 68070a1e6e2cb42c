from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
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
    event,
)
from sqlalchemy.orm import relationship

from heliparts.database import Base

from .errors import LedgerImmutableError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls) -> list:
    return [member.value for member in enum_cls]


class InventoryTransactionTypeEnum(str, enum.Enum):
    ADD = "add"
    INSTALL = "install"
    RETURN = "return"
    ADJUST = "adjust"


# reference_type value used by install / return entries
INSTALLATION_REFERENCE = "installation"


class Part(Base):
    __tablename__ = "parts"
    __table_args__ = (
        # Last line of defence behind the ledger's own check.
        CheckConstraint("quantity_in_stock >= 0", name="ck_parts_quantity_in_stock_nonneg"),
        CheckConstraint("minimum_quantity >= 0", name="ck_parts_minimum_quantity_nonneg"),
        Index("ix_parts_stock_minimum", "quantity_in_stock", "minimum_quantity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    part_number = Column(String(64), nullable=False, unique=True, index=True)
    description = Column(String(255), nullable=True)
    manufacturer = Column(String(128), nullable=True)
    category = Column(String(64), nullable=True, index=True)
    location = Column(String(64), nullable=True)
    unit_price = Column(Float, nullable=True)
    is_life_limited = Column(Boolean, nullable=False, default=False)

    # Authoritative on-hand quantity. Written only by the ledger.
    quantity_in_stock = Column(Integer, nullable=False, default=0)
    minimum_quantity = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    alerts = relationship("InventoryAlert", back_populates="part", lazy="selectin")


class InventoryTransaction(Base):
    """
    One stock quantity change and the resulting total.

    Rows are append-only: once flushed they are never updated or deleted.
    """

    __tablename__ = "inventory_transactions"
    __table_args__ = (
        Index("ix_inventory_transactions_part_created", "part_id", "created_at"),
        Index("ix_inventory_transactions_reference", "reference_type", "reference_id"),
        CheckConstraint("quantity_change <> 0", name="ck_inventory_transactions_change_nonzero"),
        CheckConstraint("quantity_after >= 0", name="ck_inventory_transactions_after_nonneg"),
    )

    id = Column(Integer, primary_key=True, index=True)
    part_id = Column(Integer, ForeignKey("parts.id", ondelete="RESTRICT"), nullable=False, index=True)

    transaction_type = Column(
        SAEnum(
            InventoryTransactionTypeEnum,
            name="inventory_transaction_type_enum",
            native_enum=False,
            values_callable=_enum_values,
        ),
        nullable=False,
        index=True,
    )
    quantity_change = Column(Integer, nullable=False)
    quantity_after = Column(Integer, nullable=False)

    reference_type = Column(String(32), nullable=True)
    reference_id = Column(Integer, nullable=True)

    performed_by_user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    part = relationship("Part", lazy="joined")
    performed_by = relationship("User", lazy="joined")


@event.listens_for(InventoryTransaction, "before_update")
def _block_ledger_update(mapper, connection, target: InventoryTransaction):
    raise LedgerImmutableError(f"Inventory transaction {target.id} is append-only and cannot be updated.")


@event.listens_for(InventoryTransaction, "before_delete")
def _block_ledger_delete(mapper, connection, target: InventoryTransaction):
    raise LedgerImmutableError(f"Inventory transaction {target.id} is append-only and cannot be deleted.")


class InventoryAlert(Base):
    """
    Custom low-stock threshold for one part.

    While active it takes precedence over the part's own minimum_quantity.
    """

    __tablename__ = "inventory_alerts"
    __table_args__ = (
        Index("ix_inventory_alerts_part_active", "part_id", "is_active"),
        CheckConstraint("threshold_quantity >= 0", name="ck_inventory_alerts_threshold_nonneg"),
    )

    id = Column(Integer, primary_key=True, index=True)
    part_id = Column(Integer, ForeignKey("parts.id", ondelete="CASCADE"), nullable=False, index=True)
    alert_type = Column(String(32), nullable=False, default="low_stock")
    threshold_quantity = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    email_notification = Column(Boolean, nullable=False, default=True)

    created_by_user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    part = relationship("Part", back_populates="alerts", lazy="joined")
    created_by = relationship("User", lazy="joined")
