from __future__ import annotations

from decimal import Decimal, InvalidOperation

from ebird_alerts.modules.extraction.errors import CoordinateParseError
from ebird_alerts.modules.extraction.parsers.text import between


def parse_coordinates(map_url: str) -> tuple[Decimal, Decimal]:
    """
    Latitude/longitude from a digest map link.

    Example: "http://maps.google.com/?ie=UTF8&t=p&z=13&q=30.123,-81.456&ll=30.123,-81.456"
    """
    raw = _query_span(map_url)
    parts = raw.split(",")
    if len(parts) != 2:
        raise CoordinateParseError(f"Expected 'lat,lng' in map link, got {raw!r}")

    try:
        lat = Decimal(parts[0].strip())
        lng = Decimal(parts[1].strip())
    except InvalidOperation as e:
        raise CoordinateParseError(f"Non-numeric coordinates in map link: {raw!r}") from e

    if not lat.is_finite() or not lng.is_finite():
        raise CoordinateParseError(f"Non-numeric coordinates in map link: {raw!r}")
    if not Decimal(-90) <= lat <= Decimal(90):
        raise CoordinateParseError(f"Latitude out of range: {lat}")
    if not Decimal(-180) <= lng <= Decimal(180):
        raise CoordinateParseError(f"Longitude out of range: {lng}")
    return lat, lng


def _query_span(map_url: str) -> str:
    # Digest links carry "&q=...&ll=..."; hand-built links may lead with "?q=".
    start_marker = "&q=" if "&q=" in map_url else "?q="
    return between(map_url, start_marker, "&ll", error=CoordinateParseError).value
