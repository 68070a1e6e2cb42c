from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"

from heliparts.database import Base  # noqa: E402
from heliparts.apps.accounts import models as account_models  # noqa: E402
from heliparts.apps.fleet import models as fleet_models  # noqa: E402
from heliparts.apps.inventory import models as inventory_models  # noqa: E402
from heliparts.apps.installations import models as installation_models  # noqa: E402


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(
        bind=engine,
        tables=[
            account_models.User.__table__,
            fleet_models.Helicopter.__table__,
            inventory_models.Part.__table__,
            inventory_models.InventoryTransaction.__table__,
            inventory_models.InventoryAlert.__table__,
            installation_models.PartInstallation.__table__,
        ],
    )
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def mechanic(db_session):
    user = account_models.User(
        username="j.rotor",
        email="j.rotor@heliparts.example",
        full_name="Jo Rotor",
        role=account_models.AccountRole.MECHANIC,
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture()
def helicopter(db_session):
    heli = fleet_models.Helicopter(tail_number="N407HP", model="Bell 407", manufacturer="Bell", year=2012)
    db_session.add(heli)
    db_session.commit()
    db_session.refresh(heli)
    return heli
