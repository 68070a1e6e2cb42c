from __future__ import annotations

from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from heliparts.apps.fleet import models as fleet_models
from heliparts.apps.installations import models as installation_models

from . import models, schemas
from .errors import NotFoundError


def _require_part(db: Session, part_id: int) -> models.Part:
    part = db.query(models.Part).filter(models.Part.id == part_id).first()
    if not part:
        raise NotFoundError("Part not found.")
    return part


def _to_read(
    entry: models.InventoryTransaction,
    *,
    helicopter_id: Optional[int],
    tail_number: Optional[str],
) -> schemas.InventoryTransactionRead:
    return schemas.InventoryTransactionRead(
        id=entry.id,
        part_id=entry.part_id,
        part_number=entry.part.part_number if entry.part else None,
        transaction_type=entry.transaction_type,
        quantity_change=entry.quantity_change,
        quantity_after=entry.quantity_after,
        reference_type=entry.reference_type,
        reference_id=entry.reference_id,
        performed_by_user_id=entry.performed_by_user_id,
        performed_by_username=entry.performed_by.username if entry.performed_by else None,
        helicopter_id=helicopter_id,
        helicopter_tail_number=tail_number,
        notes=entry.notes,
        created_at=entry.created_at,
    )


def to_transaction_read(db: Session, entry: models.InventoryTransaction) -> schemas.InventoryTransactionRead:
    """Single-entry variant of the history row, used for freshly written entries."""
    helicopter_id = tail_number = None
    if entry.reference_type == models.INSTALLATION_REFERENCE and entry.reference_id is not None:
        installation = db.get(installation_models.PartInstallation, entry.reference_id)
        if installation is not None:
            helicopter_id = installation.helicopter_id
            tail_number = installation.helicopter.tail_number if installation.helicopter else None
    return _to_read(entry, helicopter_id=helicopter_id, tail_number=tail_number)


def history_for(db: Session, *, part_id: int) -> List[schemas.InventoryTransactionRead]:
    """
    Ledger entries for a part, newest first, with actor and helicopter context.

    Entries that reference an installation carry the helicopter that
    installation was fitted to; other entries leave those fields empty.
    """
    _require_part(db, part_id)
    Installation = installation_models.PartInstallation
    Helicopter = fleet_models.Helicopter
    rows = (
        db.query(models.InventoryTransaction, Installation.helicopter_id, Helicopter.tail_number)
        .outerjoin(
            Installation,
            and_(
                models.InventoryTransaction.reference_type == models.INSTALLATION_REFERENCE,
                models.InventoryTransaction.reference_id == Installation.id,
            ),
        )
        .outerjoin(Helicopter, Helicopter.id == Installation.helicopter_id)
        .filter(models.InventoryTransaction.part_id == part_id)
        .order_by(models.InventoryTransaction.created_at.desc(), models.InventoryTransaction.id.desc())
        .all()
    )
    return [
        _to_read(entry, helicopter_id=helicopter_id, tail_number=tail_number)
        for entry, helicopter_id, tail_number in rows
    ]


def chronological_entries(db: Session, *, part_id: int) -> List[models.InventoryTransaction]:
    return (
        db.query(models.InventoryTransaction)
        .filter(models.InventoryTransaction.part_id == part_id)
        .order_by(models.InventoryTransaction.created_at.asc(), models.InventoryTransaction.id.asc())
        .all()
    )


def verify_ledger(db: Session, *, part_id: int) -> schemas.LedgerVerificationRead:
    """
    Replay a part's entries oldest first and compare with stored totals.

    The opening quantity is whatever stock the part held before its first
    entry. Each entry's quantity_after must equal the running total, and the
    final total must equal the part's current quantity_in_stock.
    """
    part = _require_part(db, part_id)
    entries = chronological_entries(db, part_id=part_id)
    current = part.quantity_in_stock or 0

    if not entries:
        return schemas.LedgerVerificationRead(
            part_id=part.id,
            consistent=True,
            opening_quantity=current,
            ledger_total=current,
            quantity_in_stock=current,
            entry_count=0,
        )

    opening = entries[0].quantity_after - entries[0].quantity_change
    running = opening
    mismatched: List[int] = []
    for entry in entries:
        running += entry.quantity_change
        if running != entry.quantity_after or running < 0:
            mismatched.append(entry.id)

    return schemas.LedgerVerificationRead(
        part_id=part.id,
        consistent=not mismatched and running == current and opening >= 0,
        opening_quantity=opening,
        ledger_total=running,
        quantity_in_stock=current,
        entry_count=len(entries),
        mismatched_entry_ids=mismatched,
    )
