from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from heliparts.security import get_current_active_user, require_roles
from heliparts.database import get_db, get_read_db
from heliparts.apps.accounts import models as account_models

from . import alerts, history, schemas, services
from .errors import InventoryError, to_http_exception

router = APIRouter(
    prefix="",
    tags=["inventory"],
)

# ADMIN passes every role check implicitly.
STOCK_WRITE_ROLES = [
    account_models.AccountRole.MECHANIC,
    account_models.AccountRole.USER,
]

STOCK_ADJUST_ROLES = [
    account_models.AccountRole.ADMIN,
]

ALERT_WRITE_ROLES = [
    account_models.AccountRole.MECHANIC,
    account_models.AccountRole.USER,
]


# ---------------------------------------------------------------------------
# PARTS / STOCK
# ---------------------------------------------------------------------------


@router.post(
    "/parts",
    response_model=schemas.PartRead,
    status_code=status.HTTP_201_CREATED,
)
def create_part(
    payload: schemas.PartCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*STOCK_WRITE_ROLES)),
):
    try:
        part = services.create_part(db, payload=payload, actor_user_id=current_user.id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    db.refresh(part)
    return part


@router.post(
    "/parts/{part_id}/receive",
    response_model=schemas.StockMovementRead,
    status_code=status.HTTP_201_CREATED,
)
def receive_stock(
    part_id: int,
    payload: schemas.StockReceiveRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*STOCK_WRITE_ROLES)),
):
    try:
        entry = services.receive_stock(db, part_id=part_id, payload=payload, actor_user_id=current_user.id)
        part = services.get_part(db, part_id=part_id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    return schemas.StockMovementRead(
        part=schemas.PartRead.model_validate(part),
        transaction=history.to_transaction_read(db, entry),
    )


@router.post(
    "/parts/{part_id}/adjust",
    response_model=schemas.StockMovementRead,
)
def adjust_stock(
    part_id: int,
    payload: schemas.StockAdjustRequest,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*STOCK_ADJUST_ROLES)),
):
    try:
        entry = services.adjust_stock(db, part_id=part_id, payload=payload, actor_user_id=current_user.id)
        part = services.get_part(db, part_id=part_id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    return schemas.StockMovementRead(
        part=schemas.PartRead.model_validate(part),
        transaction=history.to_transaction_read(db, entry) if entry is not None else None,
    )


@router.get(
    "/parts/{part_id}/transactions",
    response_model=List[schemas.InventoryTransactionRead],
)
def part_transactions(
    part_id: int,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        return history.history_for(db, part_id=part_id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc


@router.get(
    "/parts/{part_id}/ledger/verify",
    response_model=schemas.LedgerVerificationRead,
)
def verify_part_ledger(
    part_id: int,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        return history.verify_ledger(db, part_id=part_id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc


# ---------------------------------------------------------------------------
# ALERTS
# ---------------------------------------------------------------------------


@router.get("/alerts", response_model=List[schemas.InventoryAlertRead])
def list_alerts(
    active_only: bool = False,
    part_id: Optional[int] = None,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return [
        alerts.to_alert_read(alert)
        for alert in alerts.list_alerts(db, active_only=active_only, part_id=part_id)
    ]


@router.get("/alerts/active", response_model=List[schemas.LowStockItem])
def active_alerts(
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    return alerts.list_low_stock(db)


@router.post(
    "/alerts",
    response_model=schemas.InventoryAlertRead,
    status_code=status.HTTP_201_CREATED,
)
def create_alert(
    payload: schemas.InventoryAlertCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*ALERT_WRITE_ROLES)),
):
    try:
        alert = alerts.create_alert(db, payload=payload, actor_user_id=current_user.id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    db.refresh(alert)
    return alerts.to_alert_read(alert)


@router.put("/alerts/{alert_id}", response_model=schemas.InventoryAlertRead)
def update_alert(
    alert_id: int,
    payload: schemas.InventoryAlertUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*ALERT_WRITE_ROLES)),
):
    try:
        alert = alerts.update_alert(db, alert_id=alert_id, payload=payload)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    db.refresh(alert)
    return alerts.to_alert_read(alert)


@router.delete("/alerts/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_alert(
    alert_id: int,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*ALERT_WRITE_ROLES)),
):
    try:
        alerts.delete_alert(db, alert_id=alert_id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    return None
