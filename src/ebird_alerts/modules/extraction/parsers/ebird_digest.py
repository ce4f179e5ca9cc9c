from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from dateutil import parser as date_parser

from ebird_alerts.core.logging import get_logger, log_event
from ebird_alerts.modules.extraction.errors import (
    DateParseError,
    DigestParseError,
    FieldExtractionError,
    MalformedDigest,
)
from ebird_alerts.modules.extraction.parsers.coordinates import parse_coordinates
from ebird_alerts.modules.extraction.parsers.species import split_species_name
from ebird_alerts.modules.extraction.parsers.text import after, between

logger = get_logger(__name__)

NEEDS_ALERT_MARKER = "Needs Alert for Southern"
RARE_ALERT_MARKER = "Southern Rare Bird Alert"

SECTION_START = "visit: https://ebird.org/news/please-bird-mindfully\r\n\r\n"
SECTION_END = "\r\n\r\n***"

CONTINUATION = "\r\n- "
BLOCK_SEPARATOR = "\r\n\r\n"
FIELD_SENTINEL = "\x1f"

REPORTED_START = "- Reported "
REPORTED_END = " by"
REPORTER_START = "by "
LOCATION_START = "- "
MAP_START = "- Map: "
CHECKLIST_START = "- Checklist: "

BLOCK_FIELD_COUNT = 5

_DATE_DEFAULTS = (datetime(1, 1, 1), datetime(2, 2, 2))


class DigestKind(str, enum.Enum):
    NEEDS_ALERT = "NEEDS_ALERT"
    RARE_ALERT = "RARE_ALERT"
    IRRELEVANT = "IRRELEVANT"

    @property
    def rare(self) -> bool:
        return self is DigestKind.RARE_ALERT


@dataclass(frozen=True)
class SightingBlock:
    index: int
    name_line: str
    report_line: str
    location_line: str
    map_line: str
    checklist_line: str


@dataclass(frozen=True)
class ParsedSighting:
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


@dataclass(frozen=True)
class BlockFailure:
    index: int
    error: DigestParseError


@dataclass
class DigestParseResult:
    kind: DigestKind
    records: list[ParsedSighting] = field(default_factory=list)
    failures: list[BlockFailure] = field(default_factory=list)

    @property
    def block_count(self) -> int:
        return len(self.records) + len(self.failures)


def classify_digest(text: str) -> DigestKind:
    # Rare takes precedence when a message carries both phrases.
    if RARE_ALERT_MARKER in text:
        return DigestKind.RARE_ALERT
    if NEEDS_ALERT_MARKER in text:
        return DigestKind.NEEDS_ALERT
    return DigestKind.IRRELEVANT


def extract_section(text: str) -> str:
    return between(
        text,
        SECTION_START,
        SECTION_END,
        error=MalformedDigest,
        allow_empty=True,
        strip=False,
    ).value


def split_blocks(section: str) -> list[str]:
    """One flattened line per sighting, with sub-fields joined by the sentinel."""
    flattened = section.replace(CONTINUATION, FIELD_SENTINEL + LOCATION_START)
    return [chunk.strip() for chunk in flattened.split(BLOCK_SEPARATOR) if chunk.strip()]


def split_fields(index: int, block: str) -> SightingBlock:
    parts = [p.strip() for p in block.split(FIELD_SENTINEL)]
    if len(parts) != BLOCK_FIELD_COUNT:
        raise FieldExtractionError(
            f"Block {index} has {len(parts)} sub-fields, expected {BLOCK_FIELD_COUNT}"
        )
    name_line, report_line, location_line, map_line, checklist_line = parts
    return SightingBlock(
        index=index,
        name_line=name_line,
        report_line=report_line,
        location_line=location_line,
        map_line=map_line,
        checklist_line=checklist_line,
    )


def parse_report_line(report_line: str) -> tuple[str, str]:
    date_span = between(report_line, REPORTED_START, REPORTED_END)
    reporter = after(report_line, REPORTER_START, pos=date_span.end)
    return date_span.value, reporter.value


def parse_location_line(location_line: str) -> str:
    return after(location_line, LOCATION_START).value


def parse_map_line(map_line: str) -> str:
    return after(map_line, MAP_START).value


def parse_checklist_line(checklist_line: str) -> str:
    return after(checklist_line, CHECKLIST_START).value


def parse_report_date(raw: str) -> datetime:
    """
    Digest dates read like "Jan 03, 2023 08:12"; any human-readable form is
    accepted as long as it names the year, month and day.
    """
    try:
        first, second = (date_parser.parse(raw, default=d) for d in _DATE_DEFAULTS)
    except (ValueError, OverflowError) as e:
        raise DateParseError(f"Unparseable report date: {raw!r}") from e
    # A date part the text left out comes from the default, so the two parses disagree on it.
    if (first.year, first.month, first.day) != (second.year, second.month, second.day):
        raise DateParseError(f"Incomplete report date: {raw!r}")
    return first


def build_sighting(block: SightingBlock, *, rare: bool) -> ParsedSighting:
    species = split_species_name(block.name_line)
    raw_date, reported_by = parse_report_line(block.report_line)
    location_name = parse_location_line(block.location_line)
    map_link = parse_map_line(block.map_line)
    checklist_link = parse_checklist_line(block.checklist_line)
    lat, lng = parse_coordinates(map_link)

    return ParsedSighting(
        rare=rare,
        common_name=species.common_name,
        scientific_name=species.scientific_name,
        date_reported=parse_report_date(raw_date),
        reported_by=reported_by,
        location_name=location_name,
        lat=lat,
        lng=lng,
        map_link=map_link,
        checklist_link=checklist_link,
    )


def parse_digest(text: str) -> DigestParseResult:
    """
    Turn one digest body into sightings.

    Raises `MalformedDigest` when the sighting section cannot be located. Any
    other parse error is confined to its block: the block is dropped and
    recorded in `failures`, and its siblings are still parsed.
    """
    kind = classify_digest(text)
    result = DigestParseResult(kind=kind)
    if kind is DigestKind.IRRELEVANT:
        return result

    section = extract_section(text)
    for index, raw_block in enumerate(split_blocks(section)):
        try:
            block = split_fields(index, raw_block)
            result.records.append(build_sighting(block, rare=kind.rare))
        except DigestParseError as e:
            result.failures.append(BlockFailure(index=index, error=e))
            log_event(
                logger,
                "digest.block.dropped",
                level=logging.WARNING,
                block_index=index,
                error_type=type(e).__name__,
                error=str(e),
            )

    log_event(
        logger,
        "digest.parse.finish",
        kind=kind.value,
        block_count=result.block_count,
        record_count=len(result.records),
        dropped_count=len(result.failures),
    )
    return result
