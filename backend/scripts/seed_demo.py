from __future__ import annotations

from heliparts.database import WriteSessionLocal
from heliparts.apps.accounts import models as account_models
from heliparts.apps.fleet import models as fleet_models
from heliparts.apps.inventory import models as inventory_models
from heliparts.apps.inventory import schemas as inventory_schemas
from heliparts.apps.inventory import alerts as inventory_alerts
from heliparts.apps.inventory import services as inventory_services
from heliparts.apps.installations import models as installation_models
from heliparts.apps.installations import schemas as installation_schemas
from heliparts.apps.installations import services as installation_services


DEMO_HELICOPTERS = [
    {"tail_number": "N407HP", "model": "Bell 407", "manufacturer": "Bell", "year": 2012},
    {"tail_number": "N135EC", "model": "H135", "manufacturer": "Airbus Helicopters", "year": 2018},
]

DEMO_PARTS = [
    {
        "part_number": "407-040-100-105",
        "description": "Main rotor pitch link",
        "manufacturer": "Bell",
        "category": "Rotor",
        "location": "Shelf A1",
        "quantity_in_stock": 6,
        "minimum_quantity": 2,
        "is_life_limited": True,
    },
    {
        "part_number": "M83248/1-906",
        "description": "O-ring packing",
        "manufacturer": "Parker",
        "category": "Consumable",
        "location": "Bin C4",
        "quantity_in_stock": 40,
        "minimum_quantity": 25,
    },
]


def _get_or_create_mechanic(db) -> account_models.User:
    user = db.query(account_models.User).filter(account_models.User.username == "demo.mechanic").first()
    if user:
        return user
    user = account_models.User(
        username="demo.mechanic",
        email="mechanic@heliparts.example",
        full_name="Demo Mechanic",
        role=account_models.AccountRole.MECHANIC,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _get_or_create_helicopters(db) -> list:
    helicopters = []
    for data in DEMO_HELICOPTERS:
        helicopter = (
            db.query(fleet_models.Helicopter)
            .filter(fleet_models.Helicopter.tail_number == data["tail_number"])
            .first()
        )
        if not helicopter:
            helicopter = fleet_models.Helicopter(status="active", **data)
            db.add(helicopter)
            db.commit()
            db.refresh(helicopter)
        helicopters.append(helicopter)
    return helicopters


def _get_or_create_parts(db, actor: account_models.User) -> list:
    parts = []
    for data in DEMO_PARTS:
        part = (
            db.query(inventory_models.Part)
            .filter(inventory_models.Part.part_number == data["part_number"].upper())
            .first()
        )
        if not part:
            part = inventory_services.create_part(
                db,
                payload=inventory_schemas.PartCreate(**data),
                actor_user_id=actor.id,
            )
        parts.append(part)
    return parts


def _seed_alert(db, part: inventory_models.Part, actor: account_models.User) -> None:
    if part.alerts:
        return
    inventory_alerts.create_alert(
        db,
        payload=inventory_schemas.InventoryAlertCreate(part_id=part.id, threshold_quantity=30),
        actor_user_id=actor.id,
    )


def _seed_installation(db, part, helicopter, actor: account_models.User) -> None:
    existing = installation_services.list_installations(
        db,
        helicopter_id=helicopter.id,
        part_id=part.id,
        status=installation_models.InstallationStatusEnum.ACTIVE,
    )
    if existing:
        return
    installation_services.install(
        db,
        payload=installation_schemas.InstallationCreate(
            part_id=part.id,
            helicopter_id=helicopter.id,
            quantity_installed=2,
            serial_number="PL-DEMO-0001",
            hours_at_installation=1520.4,
        ),
        actor_user_id=actor.id,
    )


def main() -> None:
    db = WriteSessionLocal()
    try:
        mechanic = _get_or_create_mechanic(db)
        helicopters = _get_or_create_helicopters(db)
        pitch_link, o_ring = _get_or_create_parts(db, mechanic)
        _seed_alert(db, o_ring, mechanic)
        _seed_installation(db, pitch_link, helicopters[0], mechanic)

        for item in inventory_alerts.list_low_stock(db):
            print(f"[LOW] {item.part_number}: {item.quantity_in_stock} <= {item.effective_threshold} ({item.threshold_source})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
