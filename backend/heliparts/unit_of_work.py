# backend/heliparts/unit_of_work.py
"""
Transaction scope for stock-affecting operations.

`unit_of_work(db)` wraps a block of reads and writes so that they commit
together on success and roll back together on any exception. Services that
call each other (an installation that moves stock through the ledger) can
each open a unit of work: an inner block joins the outermost one, and only
the outermost block commits.

On PostgreSQL the unit also sets a local lock timeout so that a request
waiting on another request's row lock fails promptly instead of blocking.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import text
from sqlalchemy.orm import Session

from .database import LEDGER_LOCK_TIMEOUT_MS

logger = logging.getLogger(__name__)

_DEPTH_KEY = "unit_of_work_depth"


def in_unit_of_work(db: Session) -> bool:
    return db.info.get(_DEPTH_KEY, 0) > 0


def _apply_lock_timeout(db: Session) -> None:
    if LEDGER_LOCK_TIMEOUT_MS <= 0:
        return
    if db.get_bind().dialect.name != "postgresql":
        return
    # SET does not accept bind parameters; the value is an int from config.
    db.execute(text(f"SET LOCAL lock_timeout = '{int(LEDGER_LOCK_TIMEOUT_MS)}ms'"))


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Run the enclosed block as one atomic unit.

    - Outermost block: commit on success, rollback on every error path.
    - Nested block: joins the outer unit; errors propagate to it untouched.
    """
    depth = db.info.get(_DEPTH_KEY, 0)
    if depth:
        db.info[_DEPTH_KEY] = depth + 1
        try:
            yield db
        finally:
            db.info[_DEPTH_KEY] = depth
        return

    db.info[_DEPTH_KEY] = 1
    try:
        _apply_lock_timeout(db)
        yield db
        db.commit()
    except BaseException as exc:
        db.rollback()
        logger.debug("Unit of work rolled back", extra={"error": type(exc).__name__})
        raise
    finally:
        db.info[_DEPTH_KEY] = 0
