from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ebird_alerts.core.db import db_session
from ebird_alerts.modules.sightings.schemas import SightingOut
from ebird_alerts.modules.sightings.service import list_sightings

router = APIRouter(tags=["sightings"])


@router.get("/sightings", response_model=list[SightingOut])
def list_sightings_endpoint(session: Session = Depends(db_session)) -> list[SightingOut]:
    return [
        SightingOut.model_validate(s, from_attributes=True) for s in list_sightings(session)
    ]
