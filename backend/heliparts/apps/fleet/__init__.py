"""
Fleet app.

Helicopter master records. Only what the installation lifecycle needs
lives here: existence checks and the tail number shown next to every
installation and stock transaction.
"""

from . import models  # noqa: F401
