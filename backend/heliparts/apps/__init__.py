# backend/heliparts/apps/__init__.py
"""Feature apps: accounts, fleet, inventory and installations."""
