"""
Inventory module.

Owns part stock: the append-only transaction ledger, goods receipt and
count adjustments, low-stock alerts and the per-part transaction history.
"""

from . import models  # noqa: F401
