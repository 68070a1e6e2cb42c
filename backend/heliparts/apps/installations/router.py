from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from heliparts.security import get_current_active_user, require_roles
from heliparts.database import get_db, get_read_db
from heliparts.apps.accounts import models as account_models
from heliparts.apps.inventory.errors import InventoryError, to_http_exception

from . import models, schemas, services

router = APIRouter(
    prefix="/installations",
    tags=["installations"],
)

# ADMIN passes every role check implicitly.
INSTALLATION_WRITE_ROLES = [
    account_models.AccountRole.MECHANIC,
    account_models.AccountRole.USER,
]


@router.get("", response_model=List[schemas.InstallationRead])
def list_installations(
    helicopter_id: Optional[int] = None,
    part_id: Optional[int] = None,
    status_filter: Optional[models.InstallationStatusEnum] = Query(None, alias="status"),
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    installations = services.list_installations(
        db,
        helicopter_id=helicopter_id,
        part_id=part_id,
        status=status_filter,
    )
    return [services.to_installation_read(item) for item in installations]


@router.post(
    "",
    response_model=schemas.InstallationRead,
    status_code=status.HTTP_201_CREATED,
)
def install_part(
    payload: schemas.InstallationCreate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*INSTALLATION_WRITE_ROLES)),
):
    try:
        installation = services.install(db, payload=payload, actor_user_id=current_user.id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    db.refresh(installation)
    return services.to_installation_read(installation)


@router.get("/{installation_id}", response_model=schemas.InstallationRead)
def get_installation(
    installation_id: int,
    db: Session = Depends(get_read_db),
    current_user: account_models.User = Depends(get_current_active_user),
):
    try:
        installation = services.get_installation(db, installation_id=installation_id)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    return services.to_installation_read(installation)


@router.put("/{installation_id}", response_model=schemas.InstallationRead)
def update_installation(
    installation_id: int,
    payload: schemas.InstallationUpdate,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*INSTALLATION_WRITE_ROLES)),
):
    try:
        installation = services.update_installation(db, installation_id=installation_id, payload=payload)
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
    db.refresh(installation)
    return services.to_installation_read(installation)


@router.post("/{installation_id}/remove", response_model=schemas.InstallationRemovalRead)
def remove_installation(
    installation_id: int,
    payload: schemas.InstallationRemove,
    db: Session = Depends(get_db),
    current_user: account_models.User = Depends(require_roles(*INSTALLATION_WRITE_ROLES)),
):
    try:
        return services.remove(
            db,
            installation_id=installation_id,
            payload=payload,
            actor_user_id=current_user.id,
        )
    except InventoryError as exc:
        raise to_http_exception(exc) from exc
