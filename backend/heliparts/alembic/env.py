# backend/heliparts/alembic/env.py
"""
Migration environment for the HeliParts schema.

Online runs reuse the application's write engine. Offline runs (`--sql`)
take the URL from alembic.ini, falling back to DATABASE_WRITE_URL or
DATABASE_URL when the ini still holds the driver:// placeholder.
"""

from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context

# env.py lives in backend/heliparts/alembic; the import root is backend/.
BACKEND_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

import heliparts  # noqa: F401, E402  registers every app's tables
from heliparts.database import Base, write_engine  # noqa: E402

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

COMPARE_OPTIONS = {"compare_type": True, "compare_server_default": True}


def offline_url() -> str:
    url = (config.get_main_option("sqlalchemy.url") or "").strip()
    if not url or url.startswith("driver://"):
        url = (os.getenv("DATABASE_WRITE_URL") or os.getenv("DATABASE_URL") or "").strip()
    if not url:
        raise RuntimeError(
            "No database URL for offline migrations: set sqlalchemy.url in alembic.ini "
            "or DATABASE_WRITE_URL / DATABASE_URL."
        )
    return url


def run_offline() -> None:
    context.configure(
        url=offline_url(),
        target_metadata=Base.metadata,
        literal_binds=True,
        **COMPARE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    with write_engine.connect() as connection:
        context.configure(connection=connection, target_metadata=Base.metadata, **COMPARE_OPTIONS)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
