from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from heliparts.apps.fleet import models as fleet_models
from heliparts.apps.inventory import ledger
from heliparts.apps.inventory import models as inventory_models
from heliparts.apps.inventory.errors import (
    AlreadyRemovedError,
    NotFoundError,
    StockLockTimeout,
    ValidationError,
)
from heliparts.unit_of_work import unit_of_work

from . import models, schemas

logger = logging.getLogger(__name__)

RETURN_NOTE = "Removed from helicopter and returned to stock"
REMOVED_MESSAGE = "Part removed successfully"


def to_installation_read(installation: models.PartInstallation) -> schemas.InstallationRead:
    part = installation.part
    helicopter = installation.helicopter
    return schemas.InstallationRead(
        id=installation.id,
        part_id=installation.part_id,
        part_number=part.part_number if part else None,
        part_description=part.description if part else None,
        helicopter_id=installation.helicopter_id,
        tail_number=helicopter.tail_number if helicopter else None,
        quantity_installed=installation.quantity_installed,
        status=installation.status,
        installed_by_user_id=installation.installed_by_user_id,
        installed_by_username=installation.installed_by.username if installation.installed_by else None,
        removed_by_user_id=installation.removed_by_user_id,
        removed_by_username=installation.removed_by.username if installation.removed_by else None,
        installation_date=installation.installation_date,
        removed_date=installation.removed_date,
        serial_number=installation.serial_number,
        hours_at_installation=installation.hours_at_installation,
        notes=installation.notes,
    )


def get_installation(db: Session, *, installation_id: int) -> models.PartInstallation:
    installation = (
        db.query(models.PartInstallation)
        .filter(models.PartInstallation.id == installation_id)
        .first()
    )
    if not installation:
        raise NotFoundError("Installation not found.")
    return installation


def list_installations(
    db: Session,
    *,
    helicopter_id: Optional[int] = None,
    part_id: Optional[int] = None,
    status: Optional[models.InstallationStatusEnum] = None,
) -> List[models.PartInstallation]:
    query = db.query(models.PartInstallation)
    if helicopter_id is not None:
        query = query.filter(models.PartInstallation.helicopter_id == helicopter_id)
    if part_id is not None:
        query = query.filter(models.PartInstallation.part_id == part_id)
    if status is not None:
        query = query.filter(models.PartInstallation.status == status)
    return query.order_by(
        models.PartInstallation.installation_date.desc(),
        models.PartInstallation.id.desc(),
    ).all()


def _lock_installation(db: Session, installation_id: int) -> models.PartInstallation:
    try:
        installation = (
            db.query(models.PartInstallation)
            .filter(models.PartInstallation.id == installation_id)
            .with_for_update(of=models.PartInstallation)
            .populate_existing()
            .one_or_none()
        )
    except OperationalError as exc:
        if not ledger.is_lock_failure(exc):
            raise
        logger.warning(
            "Could not acquire installation lock",
            extra={"installation_id": installation_id, "error": str(getattr(exc, "orig", exc))},
        )
        raise StockLockTimeout(
            f"Installation {installation_id} is being updated by another request; try again."
        ) from exc
    if installation is None:
        raise NotFoundError("Installation not found.")
    return installation


def install(
    db: Session,
    *,
    payload: schemas.InstallationCreate,
    actor_user_id: Optional[str],
) -> models.PartInstallation:
    """
    Fit a quantity of a part to a helicopter and draw it from stock.

    The installation row and its "install" ledger entry commit together;
    if stock is short nothing is kept.
    """
    quantity = payload.quantity_installed if payload.quantity_installed is not None else 1

    with unit_of_work(db):
        part = ledger.lock_part(db, payload.part_id)
        helicopter = (
            db.query(fleet_models.Helicopter)
            .filter(fleet_models.Helicopter.id == payload.helicopter_id)
            .first()
        )
        if not helicopter:
            raise NotFoundError("Helicopter not found.")
        if isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError("quantity_installed must be greater than zero.")

        installation = models.PartInstallation(
            part_id=part.id,
            helicopter_id=helicopter.id,
            quantity_installed=quantity,
            status=models.InstallationStatusEnum.ACTIVE,
            installed_by_user_id=actor_user_id,
            serial_number=payload.serial_number,
            hours_at_installation=payload.hours_at_installation,
            notes=payload.notes,
        )
        db.add(installation)
        db.flush()

        ledger.apply_delta(
            db,
            part_id=part.id,
            delta=-quantity,
            transaction_type=inventory_models.InventoryTransactionTypeEnum.INSTALL,
            actor_user_id=actor_user_id,
            reference_type=inventory_models.INSTALLATION_REFERENCE,
            reference_id=installation.id,
            notes=f"Installed on {helicopter.tail_number}",
        )
        logger.info(
            "Part installed",
            extra={
                "installation_id": installation.id,
                "part_id": part.id,
                "helicopter_id": helicopter.id,
                "quantity": quantity,
            },
        )
    return installation


def remove(
    db: Session,
    *,
    installation_id: int,
    payload: schemas.InstallationRemove,
    actor_user_id: Optional[str],
) -> schemas.InstallationRemovalRead:
    """
    Take an active installation off its helicopter.

    With return_to_stock the full installed quantity goes back on the shelf
    as a "return" entry; otherwise the parts are treated as consumed.
    """
    with unit_of_work(db):
        installation = _lock_installation(db, installation_id)
        if installation.status != models.InstallationStatusEnum.ACTIVE:
            raise AlreadyRemovedError(installation.id)

        installation.status = models.InstallationStatusEnum.REMOVED
        installation.removed_by_user_id = actor_user_id
        installation.removed_date = datetime.now(timezone.utc)
        if payload.notes is not None:
            installation.notes = payload.notes
        db.add(installation)
        db.flush()

        quantity_returned = 0
        if payload.return_to_stock:
            ledger.apply_delta(
                db,
                part_id=installation.part_id,
                delta=installation.quantity_installed,
                transaction_type=inventory_models.InventoryTransactionTypeEnum.RETURN,
                actor_user_id=actor_user_id,
                reference_type=inventory_models.INSTALLATION_REFERENCE,
                reference_id=installation.id,
                notes=RETURN_NOTE,
            )
            quantity_returned = installation.quantity_installed

        logger.info(
            "Part removed",
            extra={
                "installation_id": installation.id,
                "part_id": installation.part_id,
                "quantity_returned": quantity_returned,
            },
        )

    return schemas.InstallationRemovalRead(
        message=REMOVED_MESSAGE,
        installation_id=installation_id,
        returned_to_stock=payload.return_to_stock,
        quantity_returned=quantity_returned,
    )


def update_installation(
    db: Session,
    *,
    installation_id: int,
    payload: schemas.InstallationUpdate,
) -> models.PartInstallation:
    # Descriptive fields only; part, helicopter, quantity and status are fixed.
    data = payload.model_dump(exclude_unset=True)
    with unit_of_work(db):
        installation = get_installation(db, installation_id=installation_id)
        for field, value in data.items():
            setattr(installation, field, value)
        db.add(installation)
        db.flush()
    return installation
