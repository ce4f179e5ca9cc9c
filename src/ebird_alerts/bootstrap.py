from __future__ import annotations

import ebird_alerts.models  # noqa: F401
from ebird_alerts.core.config import settings
from ebird_alerts.core.db import engine
from ebird_alerts.core.models import Base


def bootstrap() -> None:
    # Outside dev, the schema is owned by alembic migrations.
    if settings.environment == "dev" and str(settings.database_url).startswith("sqlite"):
        Base.metadata.create_all(engine)
