"""
Installations module.

Tracks parts fitted to helicopters. Installing draws stock through the
inventory ledger; removing may return it.
"""

from . import models  # noqa: F401
