# backend/heliparts/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- String relationship targets ("Part", "Helicopter", "User") resolve.

The actual model classes are kept in heliparts/apps/*/models.py.
"""

from .apps.accounts import models as accounts_models              # users / roles
from .apps.fleet import models as fleet_models                    # helicopters
from .apps.inventory import models as inventory_models            # parts, ledger, alerts
from .apps.installations import models as installations_models    # parts fitted to helicopters

__all__ = [
    "accounts_models",
    "fleet_models",
    "inventory_models",
    "installations_models",
]
