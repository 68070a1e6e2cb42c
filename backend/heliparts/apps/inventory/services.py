from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from heliparts.unit_of_work import unit_of_work

from . import ledger, models, schemas
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _normalize_part_number(part_number: str) -> str:
    return (part_number or "").strip().upper()


def _get_part_by_number(db: Session, *, part_number: str) -> Optional[models.Part]:
    return (
        db.query(models.Part)
        .filter(models.Part.part_number == _normalize_part_number(part_number))
        .first()
    )


def get_part(db: Session, *, part_id: int) -> models.Part:
    part = db.query(models.Part).filter(models.Part.id == part_id).first()
    if not part:
        raise NotFoundError("Part not found.")
    return part


def create_part(
    db: Session,
    *,
    payload: schemas.PartCreate,
    actor_user_id: Optional[str],
) -> models.Part:
    """
    Register a part. The row starts at zero stock and any opening quantity
    goes through the ledger as an "add" entry.
    """
    part_number = _normalize_part_number(payload.part_number)
    if not part_number:
        raise ValidationError("part_number is required.")

    with unit_of_work(db):
        if _get_part_by_number(db, part_number=part_number):
            raise ValidationError(f"Part number {part_number} already exists.")
        data = payload.model_dump(exclude={"part_number", "quantity_in_stock"})
        part = models.Part(part_number=part_number, quantity_in_stock=0, **data)
        db.add(part)
        try:
            db.flush()
        except IntegrityError as exc:
            raise ValidationError(f"Part number {part_number} already exists.") from exc

        if payload.quantity_in_stock > 0:
            ledger.apply_delta(
                db,
                part_id=part.id,
                delta=payload.quantity_in_stock,
                transaction_type=models.InventoryTransactionTypeEnum.ADD,
                actor_user_id=actor_user_id,
                notes="Initial stock",
            )
        logger.info(
            "Part created",
            extra={"part_id": part.id, "part_number": part_number, "opening_quantity": payload.quantity_in_stock},
        )
    return part


def receive_stock(
    db: Session,
    *,
    part_id: int,
    payload: schemas.StockReceiveRequest,
    actor_user_id: Optional[str],
) -> models.InventoryTransaction:
    if payload.quantity <= 0:
        raise ValidationError("quantity must be greater than zero.")
    return ledger.apply_delta(
        db,
        part_id=part_id,
        delta=payload.quantity,
        transaction_type=models.InventoryTransactionTypeEnum.ADD,
        actor_user_id=actor_user_id,
        notes=payload.notes or "Stock received",
    )


def adjust_stock(
    db: Session,
    *,
    part_id: int,
    payload: schemas.StockAdjustRequest,
    actor_user_id: Optional[str],
) -> Optional[models.InventoryTransaction]:
    """
    Reconcile stock with a physical count.

    The difference is computed under the part lock. Returns None, and writes
    nothing, when the count matches the recorded quantity.
    """
    if payload.counted_quantity < 0:
        raise ValidationError("counted_quantity cannot be negative.")
    with unit_of_work(db):
        part = ledger.lock_part(db, part_id)
        delta = payload.counted_quantity - (part.quantity_in_stock or 0)
        if delta == 0:
            logger.info("Stock count matches ledger", extra={"part_id": part.id, "quantity": payload.counted_quantity})
            return None
        return ledger.apply_delta(
            db,
            part_id=part.id,
            delta=delta,
            transaction_type=models.InventoryTransactionTypeEnum.ADJUST,
            actor_user_id=actor_user_id,
            notes=payload.notes or "Stock count adjustment",
        )
