from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ebird_alerts.core.models import Base, CreatedAt, UUIDPrimaryKey


class Sighting(UUIDPrimaryKey, CreatedAt, Base):
    __tablename__ = "sightings_sighting"
    __table_args__ = (
        UniqueConstraint(
            "common_name",
            "scientific_name",
            "date_reported",
            "reported_by",
            "location_name",
            name="uq_sighting_natural_key",
        ),
    )

    rare: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    common_name: Mapped[str] = mapped_column(String(255), index=True)
    scientific_name: Mapped[str] = mapped_column(String(255))
    date_reported: Mapped[datetime] = mapped_column(DateTime(timezone=False), index=True)
    reported_by: Mapped[str] = mapped_column(String(255))
    location_name: Mapped[str] = mapped_column(String(512))
    lat: Mapped[Decimal] = mapped_column(Numeric(9, 6))
    lng: Mapped[Decimal] = mapped_column(Numeric(9, 6))
    map_link: Mapped[str] = mapped_column(Text)
    checklist_link: Mapped[str] = mapped_column(Text)
