from __future__ import annotations

from types import SimpleNamespace

import pytest

from heliparts.apps.inventory import alerts as inventory_alerts
from heliparts.apps.inventory import ledger
from heliparts.apps.inventory import models as inventory_models
from heliparts.apps.inventory import schemas as inventory_schemas
from heliparts.apps.inventory.errors import NotFoundError, ValidationError


def _part(part_id, *, stock, minimum, part_number=None):
    return SimpleNamespace(
        id=part_id,
        part_number=part_number or f"PN-{part_id}",
        description=None,
        quantity_in_stock=stock,
        minimum_quantity=minimum,
    )


def _alert(alert_id, part_id, *, threshold, active=True):
    return SimpleNamespace(
        id=alert_id,
        part_id=part_id,
        threshold_quantity=threshold,
        is_active=active,
        email_notification=True,
    )


def test_minimum_quantity_is_default_threshold():
    low = inventory_alerts.evaluate_low_stock(
        [_part(1, stock=2, minimum=2), _part(2, stock=3, minimum=2)],
        [],
    )
    assert [item.part_id for item in low] == [1]
    assert low[0].effective_threshold == 2
    assert low[0].threshold_source == "minimum"
    assert low[0].alert_id is None


def test_active_alert_overrides_minimum():
    parts = [_part(1, stock=5, minimum=2)]

    low = inventory_alerts.evaluate_low_stock(parts, [_alert(10, 1, threshold=6)])
    assert len(low) == 1
    assert low[0].effective_threshold == 6
    assert low[0].threshold_source == "alert"
    assert low[0].alert_id == 10

    # A lower custom threshold also supersedes the minimum.
    assert inventory_alerts.evaluate_low_stock([_part(1, stock=2, minimum=2)], [_alert(11, 1, threshold=1)]) == []


def test_inactive_alerts_are_ignored():
    parts = [_part(1, stock=5, minimum=2)]
    assert inventory_alerts.evaluate_low_stock(parts, [_alert(10, 1, threshold=8, active=False)]) == []


def test_highest_active_threshold_wins():
    parts = [_part(1, stock=4, minimum=0)]
    alerts = [
        _alert(10, 1, threshold=3),
        _alert(11, 1, threshold=5),
        _alert(12, 1, threshold=9, active=False),
    ]

    low = inventory_alerts.evaluate_low_stock(parts, alerts)

    assert len(low) == 1
    assert low[0].alert_id == 11
    assert low[0].effective_threshold == 5


def _db_part(db, part_number, *, stock, minimum) -> inventory_models.Part:
    part = inventory_models.Part(part_number=part_number, quantity_in_stock=stock, minimum_quantity=minimum)
    db.add(part)
    db.commit()
    db.refresh(part)
    return part


def test_list_low_stock_reflects_current_stock(db_session, mechanic):
    bearing = _db_part(db_session, "BRG-1", stock=3, minimum=2)
    seal = _db_part(db_session, "SEAL-1", stock=1, minimum=4)
    _db_part(db_session, "BOLT-1", stock=50, minimum=10)

    low = inventory_alerts.list_low_stock(db_session)
    assert [item.part_number for item in low] == ["SEAL-1"]

    ledger.apply_delta(
        db_session,
        part_id=bearing.id,
        delta=-1,
        transaction_type="install",
        actor_user_id=mechanic.id,
    )

    low = inventory_alerts.list_low_stock(db_session)
    # Lowest stock first.
    assert [item.part_id for item in low] == [seal.id, bearing.id]


def test_alert_crud(db_session, mechanic):
    part = _db_part(db_session, "FLT-9", stock=10, minimum=2)

    alert = inventory_alerts.create_alert(
        db_session,
        payload=inventory_schemas.InventoryAlertCreate(part_id=part.id, threshold_quantity=12),
        actor_user_id=mechanic.id,
    )
    assert alert.alert_type == "low_stock"
    assert alert.email_notification is True
    assert alert.created_by_user_id == mechanic.id
    assert [item.part_id for item in inventory_alerts.list_low_stock(db_session)] == [part.id]

    updated = inventory_alerts.update_alert(
        db_session,
        alert_id=alert.id,
        payload=inventory_schemas.InventoryAlertUpdate(is_active=False),
    )
    assert updated.is_active is False
    assert updated.threshold_quantity == 12
    assert inventory_alerts.list_alerts(db_session, active_only=True) == []
    assert len(inventory_alerts.list_alerts(db_session)) == 1
    assert inventory_alerts.list_low_stock(db_session) == []

    read = inventory_alerts.to_alert_read(updated)
    assert read.part_number == "FLT-9"

    inventory_alerts.delete_alert(db_session, alert_id=alert.id)
    assert inventory_alerts.list_alerts(db_session) == []
    with pytest.raises(NotFoundError):
        inventory_alerts.get_alert(db_session, alert_id=alert.id)


def test_alert_for_unknown_part(db_session, mechanic):
    with pytest.raises(NotFoundError):
        inventory_alerts.create_alert(
            db_session,
            payload=inventory_schemas.InventoryAlertCreate(part_id=404, threshold_quantity=1),
            actor_user_id=mechanic.id,
        )


def test_alert_update_rejects_explicit_null(db_session, mechanic):
    part = _db_part(db_session, "FLT-10", stock=10, minimum=2)
    alert = inventory_alerts.create_alert(
        db_session,
        payload=inventory_schemas.InventoryAlertCreate(part_id=part.id, threshold_quantity=3),
        actor_user_id=mechanic.id,
    )

    with pytest.raises(ValidationError):
        inventory_alerts.update_alert(
            db_session,
            alert_id=alert.id,
            payload=inventory_schemas.InventoryAlertUpdate(threshold_quantity=None),
        )
