from __future__ import annotations

import os
import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from heliparts.database import Base
from heliparts.apps.accounts import models as account_models
from heliparts.apps.fleet import models as fleet_models
from heliparts.apps.inventory import history as inventory_history
from heliparts.apps.inventory import models as inventory_models
from heliparts.apps.inventory.errors import InsufficientStockError, StockLockTimeout
from heliparts.apps.installations import models as installation_models
from heliparts.apps.installations import schemas as installation_schemas
from heliparts.apps.installations import services as installation_services

# Row locks need a real PostgreSQL server; SQLite ignores FOR UPDATE.
POSTGRES_URL = os.getenv("HELIPARTS_TEST_POSTGRES_URL")

pytestmark = pytest.mark.skipif(not POSTGRES_URL, reason="HELIPARTS_TEST_POSTGRES_URL is not set")

TABLES = [
    account_models.User.__table__,
    fleet_models.Helicopter.__table__,
    inventory_models.Part.__table__,
    inventory_models.InventoryTransaction.__table__,
    inventory_models.InventoryAlert.__table__,
    installation_models.PartInstallation.__table__,
]


@pytest.fixture()
def pg_sessions():
    engine = create_engine(POSTGRES_URL, pool_size=4)
    Base.metadata.create_all(bind=engine, tables=TABLES)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        Base.metadata.drop_all(bind=engine, tables=TABLES)
        engine.dispose()


def _seed(factory, quantity):
    with factory() as db:
        user = account_models.User(
            username="k.hover",
            email="k.hover@heliparts.example",
            role=account_models.AccountRole.MECHANIC,
            is_active=True,
        )
        heli = fleet_models.Helicopter(tail_number="N350AS", model="AS350")
        part = inventory_models.Part(
            part_number="350A-001",
            description="Starter generator",
            quantity_in_stock=quantity,
        )
        db.add_all([user, heli, part])
        db.commit()
        return user.id, heli.id, part.id


def test_concurrent_installs_cannot_jointly_overdraw(pg_sessions):
    user_id, helicopter_id, part_id = _seed(pg_sessions, quantity=5)
    barrier = threading.Barrier(2)
    outcomes = []
    outcomes_lock = threading.Lock()

    def _worker():
        db = pg_sessions()
        try:
            barrier.wait()
            installation_services.install(
                db,
                payload=installation_schemas.InstallationCreate(
                    part_id=part_id,
                    helicopter_id=helicopter_id,
                    quantity_installed=3,
                ),
                actor_user_id=user_id,
            )
            outcome = "installed"
        except (InsufficientStockError, StockLockTimeout) as exc:
            outcome = type(exc).__name__
        finally:
            db.close()
        with outcomes_lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=_worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert len(outcomes) == 2
    assert outcomes.count("installed") == 1

    with pg_sessions() as db:
        part = db.get(inventory_models.Part, part_id)
        assert part.quantity_in_stock == 2
        assert db.query(installation_models.PartInstallation).count() == 1
        assert inventory_history.verify_ledger(db, part_id=part_id).consistent is True
