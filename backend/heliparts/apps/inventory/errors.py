"""
Typed failures raised by the ledger, installation and alert services.

Services raise these; routers turn them into HTTP responses with
`to_http_exception`. Every error carries a machine-readable `code` and a
human-readable `detail`.
"""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, status


class InventoryError(Exception):
    code = "inventory_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(InventoryError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(InventoryError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class InsufficientStockError(InventoryError):
    code = "insufficient_stock"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, *, part_id: int, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for part {part_id}: {available} available, {requested} requested."
        )
        self.part_id = part_id
        self.available = available
        self.requested = requested


class AlreadyRemovedError(InventoryError):
    code = "already_removed"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, installation_id: int):
        super().__init__(f"Installation {installation_id} has already been removed.")
        self.installation_id = installation_id


class StockLockTimeout(InventoryError):
    """Another request holds the part lock; the caller may resubmit."""

    code = "stock_locked"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class LedgerImmutableError(InventoryError):
    code = "ledger_immutable"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(exc: InventoryError, *, headers: Optional[dict] = None) -> HTTPException:
    if isinstance(exc, StockLockTimeout) and headers is None:
        headers = {"Retry-After": "1"}
    return HTTPException(
        status_code=exc.status_code,
        detail={"code": exc.code, "message": exc.detail},
        headers=headers,
    )
