from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from ebird_alerts.modules.extraction.errors import NameDisambiguationError
from ebird_alerts.modules.extraction.parsers.text import Span, paren_groups

EXOTIC_QUALIFIER = "Exotic: Naturalized"

# eBird appends the reported tally as a final group: "(1)", "(12)", or "(X)" for present.
_COUNT_RE = re.compile(r"^(?:\d+|X)$", re.I)


class NameRule(str, enum.Enum):
    EXOTIC_NATURALIZED = "EXOTIC_NATURALIZED"
    SINGLE_GROUP = "SINGLE_GROUP"
    MULTI_GROUP = "MULTI_GROUP"


# Position of the scientific-name group, counted from the end of a line that
# carries the trailing count group.
_OFFSET_FROM_END = {
    NameRule.EXOTIC_NATURALIZED: 3,
    NameRule.SINGLE_GROUP: 1,
    NameRule.MULTI_GROUP: 2,
}


@dataclass(frozen=True)
class SpeciesName:
    common_name: str
    scientific_name: str
    rule: NameRule
    count: str | None = None


def classify_name_line(name_line: str, groups: list[Span]) -> NameRule:
    if EXOTIC_QUALIFIER in name_line:
        return NameRule.EXOTIC_NATURALIZED
    if len(groups) < 2:
        return NameRule.SINGLE_GROUP
    return NameRule.MULTI_GROUP


def split_species_name(name_line: str) -> SpeciesName:
    """
    Split "<Common> (<...>) [(<Scientific>)] [(Exotic: Naturalized)] [(<count>)]".

    Groups are always counted from the end of the line, since annotations
    earlier in the name may carry their own parentheses. Digest name lines end
    with a count group; when that group is absent the scientific name sits one
    place closer to the end.
    """
    line = " ".join(name_line.split())
    groups = paren_groups(line)
    if not groups:
        raise NameDisambiguationError(f"No parenthetical group in name line: {line!r}")

    rule = classify_name_line(line, groups)
    offset = _OFFSET_FROM_END[rule]

    count = None
    if len(groups) > 1 and _COUNT_RE.match(groups[-1].value):
        count = groups[-1].value
    elif rule is not NameRule.SINGLE_GROUP:
        offset -= 1

    if offset > len(groups):
        raise NameDisambiguationError(
            f"Expected at least {offset} parenthetical groups for {rule.value}: {line!r}"
        )
    scientific = groups[-offset]
    if not scientific.value or scientific.value == EXOTIC_QUALIFIER:
        raise NameDisambiguationError(f"No scientific name group in name line: {line!r}")
    if _COUNT_RE.match(scientific.value):
        raise NameDisambiguationError(f"Scientific name group is a count: {line!r}")

    common = line[: groups[0].start].strip()
    if not common:
        raise NameDisambiguationError(f"No common name before groups: {line!r}")
    if rule is NameRule.EXOTIC_NATURALIZED:
        common = f"{common} ({EXOTIC_QUALIFIER})"

    return SpeciesName(
        common_name=common,
        scientific_name=scientific.value,
        rule=rule,
        count=count,
    )
