"""
Education parsing: degree entries from an education / academic qualifications section.

Rule-based and conservative: the degree comes from the degree table, the
institution from the institution table, and anything the tables cannot
resolve is kept with a placeholder and reported as a warning.
"""

import logging
import re
from typing import List, Optional

from cvparser.core.diagnostics import WarningCollector, excerpt
from cvparser.core.entries import EDUCATION_STRATEGIES, parse_each, split_entries
from cvparser.core.patterns import (
    DEGREE_RULES,
    FIELD_OF_STUDY_RULES,
    INSTITUTION_RULES,
    LOCATION_RULES,
    classify,
    extract_first,
    extract_year,
    extract_year_range,
    generate_stable_id,
    scan_window,
    tidy,
)
from cvparser.core.schemas import Education

logger = logging.getLogger(__name__)


UNKNOWN_INSTITUTION = "Unknown Institution"
MAX_DEGREE_CHARS = 100

# ===== LABELLED FIELDS =====

THESIS_RE = re.compile(r"\b(?:Thesis|Dissertation)(?:\s+title)?\s*[:\-]\s*([^\n]+)", re.IGNORECASE)
SUPERVISOR_RE = re.compile(r"\bSupervisors?\s*[:\-]?\s+(?:Prof(?:essor)?\.?\s*)?([^\n]+)", re.IGNORECASE)


def _resolve_degree(entry: str, first_line: str, index: int, warnings: WarningCollector) -> str:
    window = scan_window(entry)
    degree = classify(DEGREE_RULES, window)
    if degree is None:
        warnings.info(
            "education",
            f"Education {index + 1}: degree type unclear - using first line",
            index=index,
            raw=excerpt(entry),
        )
        return first_line[:MAX_DEGREE_CHARS]

    field = extract_first(FIELD_OF_STUDY_RULES, first_line) or extract_first(FIELD_OF_STUDY_RULES, window)
    if field:
        return f"{degree} in {field}"
    return degree


def _resolve_institution(entry: str, index: int, warnings: WarningCollector) -> str:
    institution = tidy(extract_first(INSTITUTION_RULES, scan_window(entry)))
    if institution:
        return institution
    warnings.warning(
        "education",
        f"Education {index + 1}: institution not found - please review",
        index=index,
        raw=excerpt(entry),
    )
    return UNKNOWN_INSTITUTION


def _labelled(pattern: "re.Pattern[str]", entry: str) -> Optional[str]:
    m = pattern.search(entry)
    return tidy(m.group(1)) if m else None


def parse_education_entry(entry: str, index: int, warnings: WarningCollector) -> Education:
    """
    Turn one education entry into an Education record.

    Examples:
        "Ph.D. in Geomatics Engineering | INHA University | South Korea | 2013 - 2017"
            -> degree="Ph.D. in Geomatics Engineering", institution="INHA University",
               location="South Korea", period="2013 - 2017", year="2017"
    """
    entry = entry.strip()
    lines = entry.split("\n")
    first_line = lines[0].strip()

    period = None
    year = None
    year_range = extract_year_range(scan_window(entry))
    if year_range:
        start, end = year_range
        period = f"{start} - {end}"
        year = start if end == "Present" else end
    else:
        single = extract_year(scan_window(entry))
        year = str(single) if single else None

    details = "\n".join(l.strip() for l in lines[1:] if l.strip()) or None

    return Education(
        id=generate_stable_id(entry, index),
        degree=_resolve_degree(entry, first_line, index, warnings),
        institution=_resolve_institution(entry, index, warnings),
        location=extract_first(LOCATION_RULES, scan_window(entry)),
        year=year,
        period=period,
        thesis=_labelled(THESIS_RE, entry),
        supervisor=_labelled(SUPERVISOR_RE, entry),
        details=details,
        raw=entry,
    )


def parse_education(
    text: str,
    warnings: WarningCollector,
    section_title: str = "Education",
    min_length: int = 20,
) -> List[Education]:
    """
    Parse an education section.

    Args:
        text: Section content (header line excluded)
        warnings: Collector for this parse call
        section_title: Title used to tag entry-level errors
        min_length: Shorter entries are dropped as noise

    Returns:
        One Education per entry, in document order
    """
    entries = split_entries(text, EDUCATION_STRATEGIES, min_length)
    logger.debug(f"Education: {len(entries)} entries in '{section_title}'")
    return parse_each(entries, lambda e, i: parse_education_entry(e, i, warnings), warnings, section_title)
