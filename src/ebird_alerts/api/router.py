from __future__ import annotations

from fastapi import APIRouter

from ebird_alerts.modules.sightings.api import router as sightings_router

router = APIRouter()

router.include_router(sightings_router, prefix="/api")


@router.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
