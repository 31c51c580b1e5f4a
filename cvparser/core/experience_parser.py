"""
Experience parsing: positions / appointments.

An entry is a head line (role, organization, dates) optionally followed by
detail lines and bullet achievements. Bullets stay with the position they
follow; see `entries.headed_blocks`.
"""

import logging
import re
from typing import List

from cvparser.core.diagnostics import WarningCollector, excerpt
from cvparser.core.entries import EXPERIENCE_STRATEGIES, parse_each, split_entries
from cvparser.core.patterns import (
    LOCATION_RULES,
    ORGANIZATION_RULES,
    POSITION_TITLE_RULES,
    POSITION_TYPE_RULES,
    classify,
    extract_first,
    extract_year,
    extract_year_range,
    generate_stable_id,
    scan_window,
    tidy,
)
from cvparser.core.schemas import Position

logger = logging.getLogger(__name__)


UNKNOWN_ORGANIZATION = "Unknown Organization"
UNKNOWN_PERIOD = "Unknown"
MAX_TITLE_CHARS = 100

ACHIEVEMENT_RE = re.compile(r"^\s*[•●▪◦·*-]\s*(.+)$")


def _resolve_period(entry: str, index: int, warnings: WarningCollector) -> str:
    window = scan_window(entry)
    year_range = extract_year_range(window)
    if year_range:
        return f"{year_range[0]} - {year_range[1]}"
    year = extract_year(window)
    if year:
        return str(year)
    warnings.info(
        "experience",
        f"Position {index + 1}: period unclear - please review",
        index=index,
        raw=excerpt(entry),
    )
    return UNKNOWN_PERIOD


def parse_position_entry(entry: str, index: int, warnings: WarningCollector) -> Position:
    """
    Turn one experience entry into a Position.

    Examples:
        "Associate Professor | INHA University | South Korea | 2022 - Present\\n- Led the Geo-AI lab"
            -> title="Associate Professor", type="academic", institution="INHA University",
               period="2022 - Present", achievements=["Led the Geo-AI lab"]
    """
    entry = entry.strip()
    lines = entry.split("\n")
    first_line = lines[0].strip()

    title = tidy(extract_first(POSITION_TITLE_RULES, first_line)) or first_line[:MAX_TITLE_CHARS]

    institution = tidy(extract_first(ORGANIZATION_RULES, scan_window(entry)))
    if not institution:
        warnings.warning(
            "experience",
            f"Position {index + 1}: organization not found - please review",
            index=index,
            raw=excerpt(entry),
        )
        institution = UNKNOWN_ORGANIZATION

    achievements = []
    details = []
    for line in lines[1:]:
        m = ACHIEVEMENT_RE.match(line)
        if m:
            achievements.append(m.group(1).strip())
        elif line.strip():
            details.append(line.strip())

    return Position(
        id=generate_stable_id(entry, index),
        title=title,
        institution=institution,
        location=extract_first(LOCATION_RULES, scan_window(entry)),
        period=_resolve_period(entry, index, warnings),
        type=classify(POSITION_TYPE_RULES, title, "other"),
        details="\n".join(details) or None,
        achievements=achievements,
        raw=entry,
    )


def parse_experience(
    text: str,
    warnings: WarningCollector,
    section_title: str = "Experience",
    min_length: int = 20,
) -> List[Position]:
    entries = split_entries(text, EXPERIENCE_STRATEGIES, min_length)
    logger.debug(f"Experience: {len(entries)} entries in '{section_title}'")
    return parse_each(entries, lambda e, i: parse_position_entry(e, i, warnings), warnings, section_title)
