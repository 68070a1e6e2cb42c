"""
Ledger store: the only code path that changes a part's quantity_in_stock.

Every change is a signed delta applied under an exclusive lock on the part
row, written together with an append-only InventoryTransaction recording the
delta and the resulting quantity. The part's stock therefore always equals
its opening stock plus the sum of its ledger entries.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Query, Session

from heliparts.unit_of_work import in_unit_of_work, unit_of_work

from . import models
from .errors import InsufficientStockError, NotFoundError, StockLockTimeout, ValidationError

logger = logging.getLogger(__name__)

# SQLSTATE lock_not_available (lock_timeout expired) and deadlock_detected.
LOCK_NOT_AVAILABLE = "55P03"
DEADLOCK_DETECTED = "40P01"
RETRYABLE_PGCODES = frozenset({LOCK_NOT_AVAILABLE, DEADLOCK_DETECTED})

SQLITE_LOCKED_MESSAGE = "database is locked"


def is_lock_failure(exc: OperationalError) -> bool:
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) in RETRYABLE_PGCODES:
        return True
    return str(orig).strip().lower() == SQLITE_LOCKED_MESSAGE


def part_lock_query(db: Session, part_id: int) -> Query:
    # FOR UPDATE OF parts: other requests touching the same part wait here
    # until the current unit of work commits or rolls back.
    return (
        db.query(models.Part)
        .filter(models.Part.id == part_id)
        .with_for_update(of=models.Part)
        .populate_existing()
    )


def lock_part(db: Session, part_id: int) -> models.Part:
    """
    Load a part and hold its row lock until the current unit of work ends.

    Raises NotFoundError for an unknown part and StockLockTimeout when the
    database gives up waiting for another request's lock.
    """
    if not in_unit_of_work(db):
        raise RuntimeError("lock_part must run inside unit_of_work().")
    try:
        part = part_lock_query(db, part_id).one_or_none()
    except OperationalError as exc:
        if not is_lock_failure(exc):
            raise
        logger.warning(
            "Could not acquire part lock",
            extra={"part_id": part_id, "error": str(getattr(exc, "orig", exc))},
        )
        raise StockLockTimeout(
            f"Part {part_id} is being updated by another request; try again."
        ) from exc
    if part is None:
        raise NotFoundError("Part not found.")
    return part


def apply_delta(
    db: Session,
    *,
    part_id: int,
    delta: int,
    transaction_type: Union[models.InventoryTransactionTypeEnum, str],
    actor_user_id: Optional[str],
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> models.InventoryTransaction:
    """
    Move `delta` units into (positive) or out of (negative) a part's stock.

    Runs as one unit of work, or joins the caller's. A deduction that would
    take stock below zero raises InsufficientStockError before anything is
    written.
    """
    if isinstance(delta, bool) or not isinstance(delta, int):
        raise ValidationError("quantity_change must be an integer.")
    if delta == 0:
        raise ValidationError("quantity_change must be non-zero.")
    transaction_type = models.InventoryTransactionTypeEnum(transaction_type)

    with unit_of_work(db):
        part = lock_part(db, part_id)
        current = part.quantity_in_stock or 0
        new_quantity = current + delta
        if new_quantity < 0:
            logger.warning(
                "Rejected stock deduction",
                extra={
                    "part_id": part.id,
                    "available": current,
                    "requested": -delta,
                    "transaction_type": transaction_type.value,
                },
            )
            raise InsufficientStockError(part_id=part.id, available=current, requested=-delta)

        part.quantity_in_stock = new_quantity
        entry = models.InventoryTransaction(
            part_id=part.id,
            transaction_type=transaction_type,
            quantity_change=delta,
            quantity_after=new_quantity,
            reference_type=reference_type,
            reference_id=reference_id,
            performed_by_user_id=actor_user_id,
            notes=notes,
        )
        db.add(part)
        db.add(entry)
        db.flush()

        logger.info(
            "Stock movement recorded",
            extra={
                "part_id": part.id,
                "transaction_id": entry.id,
                "transaction_type": transaction_type.value,
                "quantity_change": delta,
                "quantity_after": new_quantity,
            },
        )
    return entry
