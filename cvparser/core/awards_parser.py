import logging
import re
from typing import List

from cvparser.core.diagnostics import WarningCollector, excerpt
from cvparser.core.entries import AWARD_STRATEGIES, parse_each, split_entries
from cvparser.core.patterns import (
    AWARD_CATEGORY_RULES,
    AWARD_ORGANIZATION_RULES,
    classify,
    extract_first,
    extract_year,
    generate_stable_id,
    scan_window,
    tidy,
)
from cvparser.core.schemas import Award

logger = logging.getLogger(__name__)


MAX_TITLE_CHARS = 150
YEAR_SPLIT_RE = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")


def _award_title(entry: str, first_line: str) -> str:
    """Text in front of the first year, else the first line."""
    m = YEAR_SPLIT_RE.search(first_line)
    if m:
        title = tidy(first_line[:m.start()].rstrip("(["))
        if title:
            return title
    return first_line[:MAX_TITLE_CHARS]


def parse_award_entry(entry: str, index: int, warnings: WarningCollector) -> Award:
    """
    Examples:
        "Excellence in Teaching Award 2022 - University Award"
            -> title="Excellence in Teaching Award", year="2022", category="teaching"
    """
    entry = entry.strip()
    lines = entry.split("\n")
    first_line = lines[0].strip()
    window = scan_window(entry)

    year = extract_year(window)
    if year is None:
        warnings.info("awards", f"Award {index + 1}: year not found", index=index, raw=excerpt(entry))
    organization = tidy(extract_first(AWARD_ORGANIZATION_RULES, window))

    return Award(
        id=generate_stable_id(entry, index),
        title=_award_title(entry, first_line),
        organization=organization,
        year=str(year) if year else None,
        category=classify(AWARD_CATEGORY_RULES, entry, "other"),
        details="\n".join(l.strip() for l in lines[1:] if l.strip()) or None,
        raw=entry,
    )


def parse_awards(
    text: str,
    warnings: WarningCollector,
    section_title: str = "Awards",
    min_length: int = 20,
) -> List[Award]:
    entries = split_entries(text, AWARD_STRATEGIES, min_length)
    logger.debug(f"Awards: {len(entries)} entries in '{section_title}'")
    return parse_each(entries, lambda e, i: parse_award_entry(e, i, warnings), warnings, section_title)
