"""
Alembic model import hook.

Importing this module ensures all SQLAlchemy models are registered on Base.metadata.
"""

from __future__ import annotations

from ebird_alerts.modules.sightings.models import Sighting  # noqa: F401
