from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select

from ebird_alerts.core.db import SessionLocal
from ebird_alerts.modules.extraction.parsers.ebird_digest import ParsedSighting
from ebird_alerts.modules.sightings.models import Sighting
from ebird_alerts.modules.sightings.service import insert_sighting, list_sightings


def _parsed(**overrides) -> ParsedSighting:
    base = ParsedSighting(
        rare=False,
        common_name="Mottled Duck",
        scientific_name="Anas fulvigula",
        date_reported=datetime(2023, 1, 3, 8, 12),
        reported_by="Jane Doe",
        location_name="Huguenot Memorial Park",
        lat=Decimal("30.123"),
        lng=Decimal("-81.456"),
        map_link="http://maps.google.com/?q=30.123,-81.456&ll=30.123,-81.456",
        checklist_link="https://ebird.org/checklist/S1",
    )
    return replace(base, **overrides)


def test_duplicate_natural_key_is_swallowed():
    with SessionLocal() as session:
        assert insert_sighting(session, _parsed()) is True
        session.commit()

        # Non-key columns differ, natural key is the same.
        assert insert_sighting(session, _parsed(rare=True, checklist_link="https://x")) is False
        session.commit()

        count = session.scalar(select(func.count()).select_from(Sighting))
        assert count == 1


def test_records_differing_in_any_key_column_are_kept():
    with SessionLocal() as session:
        assert insert_sighting(session, _parsed()) is True
        assert insert_sighting(session, _parsed(reported_by="John Smith")) is True
        assert insert_sighting(session, _parsed(date_reported=datetime(2023, 1, 4, 8, 12))) is True
        assert insert_sighting(session, _parsed(location_name="Fort George Island")) is True
        session.commit()

        assert len(list_sightings(session)) == 4


def test_list_sightings_orders_by_report_date():
    with SessionLocal() as session:
        insert_sighting(session, _parsed(date_reported=datetime(2023, 2, 1, 9, 0)))
        insert_sighting(session, _parsed(date_reported=datetime(2023, 1, 1, 9, 0)))
        session.commit()

        dates = [s.date_reported for s in list_sightings(session)]
        assert dates == sorted(dates)


def test_rollback_discards_inserts_made_through_savepoints():
    with SessionLocal() as session:
        assert insert_sighting(session, _parsed()) is True
        assert insert_sighting(session, _parsed(reported_by="John Smith")) is True
        session.rollback()

    with SessionLocal() as session:
        assert list_sightings(session) == []
