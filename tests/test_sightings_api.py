from __future__ import annotations

from decimal import Decimal

from fastapi.testclient import TestClient


def test_get_sightings_returns_all_stored_records(make_block, make_digest):
    from ebird_alerts.core.db import SessionLocal
    from ebird_alerts.main import create_app
    from ebird_alerts.modules.extraction.parsers.ebird_digest import parse_digest
    from ebird_alerts.modules.sightings.service import insert_sighting

    parsed = parse_digest(
        make_digest(
            [make_block(), make_block("Wood Duck (Aix sponsa) (1)", reported="Jan 05, 2023 07:00")],
            title="Southern Rare Bird Alert",
        )
    )
    with SessionLocal() as session:
        for record in parsed.records:
            insert_sighting(session, record)
        session.commit()

    app = create_app()
    with TestClient(app) as client:
        resp = client.get("/api/sightings")
        assert resp.status_code == 200
        assert resp.headers.get("x-request-id")
        body = resp.json()

    assert [row["common_name"] for row in body] == ["Mottled Duck", "Wood Duck"]
    first = body[0]
    assert first["rare"] is True
    assert first["scientific_name"] == "Anas fulvigula"
    assert first["date_reported"] == "2023-01-03T08:12:00"
    assert first["reported_by"] == "Jane Doe"
    assert first["location_name"] == "Huguenot Memorial Park, Duval, Florida, US"
    assert Decimal(str(first["lat"])) == Decimal("30.123")
    assert Decimal(str(first["lng"])) == Decimal("-81.456")
    assert first["checklist_link"] == "https://ebird.org/checklist/S123456789"
    assert first["map_link"].startswith("http://maps.google.com/")


def test_get_sightings_empty_store():
    from ebird_alerts.main import create_app

    with TestClient(create_app()) as client:
        resp = client.get("/api/sightings")
    assert resp.status_code == 200
    assert resp.json() == []


def test_healthz():
    from ebird_alerts.main import create_app

    with TestClient(create_app()) as client:
        assert client.get("/healthz").json() == {"status": "ok"}
