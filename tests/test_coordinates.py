from __future__ import annotations

from decimal import Decimal

import pytest

from ebird_alerts.modules.extraction.errors import CoordinateParseError
from ebird_alerts.modules.extraction.parsers.coordinates import parse_coordinates


def test_coordinates_from_leading_q_param():
    lat, lng = parse_coordinates("http://maps.google.com/maps?q=30.123,-81.456&ll=30.123,-81.456")
    assert lat == Decimal("30.123")
    assert lng == Decimal("-81.456")


def test_coordinates_from_digest_map_link():
    lat, lng = parse_coordinates(
        "http://maps.google.com/?ie=UTF8&t=p&z=13&q=27.9506,-82.4572&ll=27.9506,-82.4572"
    )
    assert (lat, lng) == (Decimal("27.9506"), Decimal("-82.4572"))


def test_missing_q_param_fails():
    with pytest.raises(CoordinateParseError):
        parse_coordinates("http://maps.google.com/?ie=UTF8&ll=30.1,-81.4")


def test_wrong_component_count_fails():
    with pytest.raises(CoordinateParseError):
        parse_coordinates("http://maps.google.com/?z=13&q=30.1,-81.4,12&ll=30.1,-81.4")


def test_non_numeric_component_fails():
    with pytest.raises(CoordinateParseError):
        parse_coordinates("http://maps.google.com/?z=13&q=north,-81.4&ll=30.1,-81.4")


def test_out_of_range_latitude_fails():
    with pytest.raises(CoordinateParseError):
        parse_coordinates("http://maps.google.com/?z=13&q=91.0,-81.4&ll=91.0,-81.4")


def test_missing_ll_marker_fails():
    with pytest.raises(CoordinateParseError):
        parse_coordinates("http://maps.google.com/?ie=UTF8&t=p&z=13&q=30.1,-81.4")
