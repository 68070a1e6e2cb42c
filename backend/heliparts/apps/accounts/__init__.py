# backend/heliparts/apps/accounts/__init__.py
"""
Accounts app

Responsible for:
- User accounts and their high-level roles

Every stock movement and installation records the acting user from here.
Login and password handling live outside this service; the API only
resolves a bearer token to an existing, active user.
"""

from . import models  # noqa: F401

__all__ = ["models"]
