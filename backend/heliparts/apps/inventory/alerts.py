"""
Low-stock evaluation and custom alert configuration.

A part is low on stock when its quantity is at or below its effective
threshold: the highest threshold among its active alerts, or its own
minimum_quantity when it has none. The state is derived from current
stock on every call and never stored.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from heliparts.unit_of_work import unit_of_work

from . import models, schemas
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_NON_NULLABLE_ALERT_FIELDS = ("alert_type", "threshold_quantity", "is_active", "email_notification")


def _strongest_alerts(alerts: Iterable[models.InventoryAlert]) -> Dict[int, models.InventoryAlert]:
    strongest: Dict[int, models.InventoryAlert] = {}
    for alert in alerts:
        if not alert.is_active:
            continue
        current = strongest.get(alert.part_id)
        if current is None or alert.threshold_quantity > current.threshold_quantity:
            strongest[alert.part_id] = alert
    return strongest


def evaluate_low_stock(
    parts: Iterable[models.Part],
    alerts: Iterable[models.InventoryAlert],
) -> List[schemas.LowStockItem]:
    """Return the low-stock parts, in input order. Pure; touches no session."""
    strongest = _strongest_alerts(alerts)
    low: List[schemas.LowStockItem] = []
    for part in parts:
        alert = strongest.get(part.id)
        if alert is not None:
            threshold = alert.threshold_quantity
            source = "alert"
        else:
            threshold = part.minimum_quantity or 0
            source = "minimum"
        stock = part.quantity_in_stock or 0
        if stock > threshold:
            continue
        low.append(
            schemas.LowStockItem(
                part_id=part.id,
                part_number=part.part_number,
                description=part.description,
                quantity_in_stock=stock,
                minimum_quantity=part.minimum_quantity or 0,
                effective_threshold=threshold,
                threshold_source=source,
                alert_id=alert.id if alert is not None else None,
                email_notification=bool(alert.email_notification) if alert is not None else False,
            )
        )
    return low


def list_low_stock(db: Session) -> List[schemas.LowStockItem]:
    parts = db.query(models.Part).all()
    alerts = db.query(models.InventoryAlert).filter(models.InventoryAlert.is_active.is_(True)).all()
    items = evaluate_low_stock(parts, alerts)
    items.sort(key=lambda item: (item.quantity_in_stock, item.part_number))
    return items


def to_alert_read(alert: models.InventoryAlert) -> schemas.InventoryAlertRead:
    return schemas.InventoryAlertRead(
        id=alert.id,
        part_id=alert.part_id,
        part_number=alert.part.part_number if alert.part else None,
        alert_type=alert.alert_type,
        threshold_quantity=alert.threshold_quantity,
        is_active=alert.is_active,
        email_notification=alert.email_notification,
        created_by_user_id=alert.created_by_user_id,
        created_at=alert.created_at,
    )


def get_alert(db: Session, *, alert_id: int) -> models.InventoryAlert:
    alert = db.query(models.InventoryAlert).filter(models.InventoryAlert.id == alert_id).first()
    if not alert:
        raise NotFoundError("Alert not found.")
    return alert


def list_alerts(
    db: Session,
    *,
    active_only: bool = False,
    part_id: Optional[int] = None,
) -> List[models.InventoryAlert]:
    query = db.query(models.InventoryAlert)
    if active_only:
        query = query.filter(models.InventoryAlert.is_active.is_(True))
    if part_id is not None:
        query = query.filter(models.InventoryAlert.part_id == part_id)
    return query.order_by(models.InventoryAlert.created_at.desc(), models.InventoryAlert.id.desc()).all()


def create_alert(
    db: Session,
    *,
    payload: schemas.InventoryAlertCreate,
    actor_user_id: Optional[str],
) -> models.InventoryAlert:
    with unit_of_work(db):
        part = db.query(models.Part).filter(models.Part.id == payload.part_id).first()
        if not part:
            raise NotFoundError("Part not found.")
        alert = models.InventoryAlert(
            part_id=part.id,
            alert_type=payload.alert_type,
            threshold_quantity=payload.threshold_quantity,
            is_active=payload.is_active,
            email_notification=payload.email_notification,
            created_by_user_id=actor_user_id,
        )
        db.add(alert)
        db.flush()
        logger.info(
            "Inventory alert created",
            extra={"alert_id": alert.id, "part_id": part.id, "threshold_quantity": alert.threshold_quantity},
        )
    return alert


def update_alert(
    db: Session,
    *,
    alert_id: int,
    payload: schemas.InventoryAlertUpdate,
) -> models.InventoryAlert:
    data = payload.model_dump(exclude_unset=True)
    cleared = [field for field in _NON_NULLABLE_ALERT_FIELDS if field in data and data[field] is None]
    if cleared:
        raise ValidationError(f"Alert fields cannot be null: {', '.join(cleared)}.")
    with unit_of_work(db):
        alert = get_alert(db, alert_id=alert_id)
        for field, value in data.items():
            setattr(alert, field, value)
        db.add(alert)
        db.flush()
    return alert


def delete_alert(db: Session, *, alert_id: int) -> None:
    with unit_of_work(db):
        alert = get_alert(db, alert_id=alert_id)
        db.delete(alert)
        db.flush()
    logger.info("Inventory alert deleted", extra={"alert_id": alert_id})
