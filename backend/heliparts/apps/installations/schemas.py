from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from . import models


class InstallationCreate(BaseModel):
    part_id: int
    helicopter_id: int
    # Missing or null means one unit; the range is checked by the service.
    quantity_installed: Optional[int] = None
    serial_number: Optional[str] = None
    hours_at_installation: Optional[float] = None
    notes: Optional[str] = None


class InstallationUpdate(BaseModel):
    serial_number: Optional[str] = None
    hours_at_installation: Optional[float] = None
    notes: Optional[str] = None


class InstallationRemove(BaseModel):
    notes: Optional[str] = None
    # Omitted means the removed parts are consumed.
    return_to_stock: bool = False


class InstallationRead(BaseModel):
    id: int
    part_id: int
    part_number: Optional[str] = None
    part_description: Optional[str] = None
    helicopter_id: int
    tail_number: Optional[str] = None
    quantity_installed: int
    status: models.InstallationStatusEnum
    installed_by_user_id: Optional[str] = None
    installed_by_username: Optional[str] = None
    removed_by_user_id: Optional[str] = None
    removed_by_username: Optional[str] = None
    installation_date: datetime
    removed_date: Optional[datetime] = None
    serial_number: Optional[str] = None
    hours_at_installation: Optional[float] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class InstallationRemovalRead(BaseModel):
    message: str
    installation_id: int
    returned_to_stock: bool
    quantity_returned: int
