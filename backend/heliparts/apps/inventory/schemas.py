from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from . import models


class PartCreate(BaseModel):
    part_number: str
    description: Optional[str] = None
    manufacturer: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    unit_price: Optional[float] = None
    is_life_limited: bool = False
    # Opening stock; recorded as an "add" entry rather than written directly.
    quantity_in_stock: int = Field(0, ge=0)
    minimum_quantity: int = Field(0, ge=0)


class PartRead(BaseModel):
    id: int
    part_number: str
    description: Optional[str] = None
    manufacturer: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    unit_price: Optional[float] = None
    is_life_limited: bool
    quantity_in_stock: int
    minimum_quantity: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StockReceiveRequest(BaseModel):
    quantity: int = Field(..., gt=0)
    notes: Optional[str] = None


class StockAdjustRequest(BaseModel):
    counted_quantity: int = Field(..., ge=0)
    notes: Optional[str] = None


class InventoryTransactionRead(BaseModel):
    id: int
    part_id: int
    part_number: Optional[str] = None
    transaction_type: models.InventoryTransactionTypeEnum
    quantity_change: int
    quantity_after: int
    reference_type: Optional[str] = None
    reference_id: Optional[int] = None
    performed_by_user_id: Optional[str] = None
    performed_by_username: Optional[str] = None
    helicopter_id: Optional[int] = None
    helicopter_tail_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class StockMovementRead(BaseModel):
    part: PartRead
    # None when an adjustment found the counted quantity unchanged.
    transaction: Optional[InventoryTransactionRead] = None


class LedgerVerificationRead(BaseModel):
    part_id: int
    consistent: bool
    opening_quantity: int
    ledger_total: int
    quantity_in_stock: int
    entry_count: int
    mismatched_entry_ids: List[int] = Field(default_factory=list)


class InventoryAlertCreate(BaseModel):
    part_id: int
    alert_type: str = "low_stock"
    threshold_quantity: int = Field(..., ge=0)
    is_active: bool = True
    email_notification: bool = True


class InventoryAlertUpdate(BaseModel):
    alert_type: Optional[str] = None
    threshold_quantity: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    email_notification: Optional[bool] = None


class InventoryAlertRead(BaseModel):
    id: int
    part_id: int
    part_number: Optional[str] = None
    alert_type: str
    threshold_quantity: int
    is_active: bool
    email_notification: bool
    created_by_user_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class LowStockItem(BaseModel):
    part_id: int
    part_number: str
    description: Optional[str] = None
    quantity_in_stock: int
    minimum_quantity: int
    effective_threshold: int
    threshold_source: Literal["alert", "minimum"]
    alert_id: Optional[int] = None
    email_notification: bool = False
