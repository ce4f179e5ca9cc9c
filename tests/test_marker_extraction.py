from __future__ import annotations

import pytest

from ebird_alerts.modules.extraction.errors import CoordinateParseError, FieldExtractionError
from ebird_alerts.modules.extraction.parsers.text import after, between, paren_groups


def test_between_returns_span_offsets():
    span = between("- Reported Jan 03, 2023 08:12 by Jane", "- Reported ", " by")
    assert span.value == "Jan 03, 2023 08:12"
    assert span.end == len("- Reported Jan 03, 2023 08:12")


def test_between_raises_when_end_marker_missing():
    with pytest.raises(FieldExtractionError):
        between("- Reported Jan 03, 2023", "- Reported ", " by")


def test_between_uses_requested_error_type():
    with pytest.raises(CoordinateParseError):
        between("http://maps.example/?z=13", "&q=", "&", error=CoordinateParseError)


def test_after_rejects_empty_value():
    with pytest.raises(FieldExtractionError):
        after("- Checklist:   ", "- Checklist: ")


def test_after_honours_start_position():
    assert after("by by Jane", "by ", pos=1).value == "Jane"


def test_paren_groups_keeps_nested_parentheses_inside_group():
    groups = paren_groups("Duck (Domestic (feral) type) (Cairina moschata) (2)")
    assert [g.value for g in groups] == ["Domestic (feral) type", "Cairina moschata", "2"]
    assert groups[0].start == len("Duck ")


def test_paren_groups_ignores_unbalanced_parentheses():
    assert [g.value for g in paren_groups("Duck) (Aix sponsa) (unclosed")] == ["Aix sponsa"]
