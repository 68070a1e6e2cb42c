from __future__ import annotations

import pytest

from heliparts.apps.inventory import history as inventory_history
from heliparts.apps.inventory import ledger
from heliparts.apps.inventory import models as inventory_models
from heliparts.apps.inventory.errors import NotFoundError
from heliparts.apps.installations import schemas as installation_schemas
from heliparts.apps.installations import services as installation_services


def _create_part(db, *, quantity=5) -> inventory_models.Part:
    part = inventory_models.Part(part_number="PN-HIST", description="Pitch link", quantity_in_stock=quantity)
    db.add(part)
    db.commit()
    db.refresh(part)
    return part


def test_history_newest_first_with_actor_and_helicopter(db_session, mechanic, helicopter):
    part = _create_part(db_session)
    installation = installation_services.install(
        db_session,
        payload=installation_schemas.InstallationCreate(part_id=part.id, helicopter_id=helicopter.id, quantity_installed=2),
        actor_user_id=mechanic.id,
    )
    received = ledger.apply_delta(
        db_session,
        part_id=part.id,
        delta=4,
        transaction_type="add",
        actor_user_id=mechanic.id,
        notes="Received from vendor",
    )

    rows = inventory_history.history_for(db_session, part_id=part.id)

    assert [row.transaction_type.value for row in rows] == ["add", "install"]
    assert rows[0].id == received.id
    assert rows[0].helicopter_id is None
    assert rows[0].helicopter_tail_number is None
    assert rows[0].performed_by_username == "j.rotor"

    install_row = rows[1]
    assert install_row.reference_type == "installation"
    assert install_row.reference_id == installation.id
    assert install_row.helicopter_id == helicopter.id
    assert install_row.helicopter_tail_number == "N407HP"
    assert install_row.notes == "Installed on N407HP"
    assert install_row.part_number == "PN-HIST"


def test_history_does_not_reorder_ledger(db_session, mechanic):
    part = _create_part(db_session)
    for delta in (1, -2, 3):
        ledger.apply_delta(
            db_session,
            part_id=part.id,
            delta=delta,
            transaction_type="adjust",
            actor_user_id=mechanic.id,
        )

    newest_first = [row.id for row in inventory_history.history_for(db_session, part_id=part.id)]
    oldest_first = [entry.id for entry in inventory_history.chronological_entries(db_session, part_id=part.id)]

    assert newest_first == list(reversed(oldest_first))
    assert [entry.quantity_after for entry in inventory_history.chronological_entries(db_session, part_id=part.id)] == [6, 4, 7]


def test_history_for_unknown_part(db_session):
    with pytest.raises(NotFoundError):
        inventory_history.history_for(db_session, part_id=12345)


def test_verify_ledger_consistent(db_session, mechanic):
    part = _create_part(db_session, quantity=5)
    for delta in (-3, 3, 10):
        ledger.apply_delta(
            db_session,
            part_id=part.id,
            delta=delta,
            transaction_type="adjust",
            actor_user_id=mechanic.id,
        )

    result = inventory_history.verify_ledger(db_session, part_id=part.id)

    assert result.consistent is True
    assert result.opening_quantity == 5
    assert result.ledger_total == 15
    assert result.quantity_in_stock == 15
    assert result.entry_count == 3
    assert result.mismatched_entry_ids == []


def test_verify_ledger_without_entries(db_session):
    part = _create_part(db_session, quantity=7)
    result = inventory_history.verify_ledger(db_session, part_id=part.id)
    assert result.consistent is True
    assert result.entry_count == 0
    assert result.ledger_total == 7


def test_verify_ledger_detects_out_of_band_stock_write(db_session, mechanic):
    part = _create_part(db_session, quantity=5)
    ledger.apply_delta(
        db_session,
        part_id=part.id,
        delta=-1,
        transaction_type="install",
        actor_user_id=mechanic.id,
    )

    part.quantity_in_stock = 9
    db_session.commit()

    result = inventory_history.verify_ledger(db_session, part_id=part.id)
    assert result.consistent is False
    assert result.ledger_total == 4
    assert result.quantity_in_stock == 9
