from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class SightingOut(BaseModel):
    id: uuid.UUID
    rare: bool
    common_name: str
    scientific_name: str
    date_reported: datetime
    reported_by: str
    location_name: str
    lat: Decimal
    lng: Decimal
    map_link: str
    checklist_link: str
    created_at: datetime
