"""
Publication parsing: journal papers, conference papers, books and chapters.

Every entry that survives splitting becomes a Publication, even when most of
its fields could not be resolved; unresolved title/year are reported as
warnings so a person can review them.
"""

import logging
import re
from typing import List, Optional

from cvparser.core.diagnostics import WarningCollector, excerpt
from cvparser.core.entries import parse_each, split_entries
from cvparser.core.patterns import (
    AUTHORS_RE,
    IMPACT_FACTOR_RE,
    ISSUE_RE,
    PAGES_RE,
    QUARTILE_RE,
    VOLUME_RE,
    Rule,
    classify_publication_type,
    extract_authors,
    extract_doi,
    extract_first,
    extract_journal_name,
    extract_year,
    generate_stable_id,
    scan_window,
    tidy,
)
from cvparser.core.schemas import Publication

logger = logging.getLogger(__name__)


MAX_TITLE_CHARS = 200
MIN_CLEAR_TITLE_CHARS = 10
DOI_LINK_PREFIX = "https://doi.org/"

# ===== TITLE RULES (first match wins) =====

PUBLICATION_TITLE_RULES: List[Rule] = [
    Rule(re.compile(r"\"([^\"\n]{3,})\""), "quoted", 1),
    Rule(re.compile(r"“([^”\n]{3,})”"), "curly_quoted", 1),
    Rule(re.compile(r"^([^\n]+?)\.\s*(?:\(?\d{4}|(?:\w+\s+)?Journal|Vol)", re.IGNORECASE), "before_marker", 1),
]

BOOK_TITLE_RULES: List[Rule] = [
    Rule(re.compile(r"\"([^\"\n]{3,})\""), "quoted", 1),
    Rule(re.compile(r"\.\s*([^.\n]+)\..*?(?:Publisher|Press|University)", re.IGNORECASE), "before_publisher", 1),
]

# Up to four capitalized words in front: "Springer Press", "Sejong University Publication".
PUBLISHER_RE = re.compile(r"(?:[A-Z][A-Za-z&'-]*[ ]){0,4}(?:Publishers?|Press|Publication)\b[^,.\n]*")


def _optional_group(pattern: "re.Pattern[str]", text: str) -> Optional[str]:
    m = pattern.search(text)
    return m.group(1) if m else None


def _strip_author_prefix(entry: str) -> str:
    """Entry text after the `Authors (Year).` prefix, if that prefix is present."""
    if not extract_authors(entry):
        return entry
    m = AUTHORS_RE.search(scan_window(entry))
    return entry[m.end():].lstrip(" .,;:)") or entry


def _publication_title(entry: str) -> str:
    body = _strip_author_prefix(entry)
    title = extract_first(PUBLICATION_TITLE_RULES, scan_window(body))
    if title:
        return tidy(title) or ""
    first_line = body.split("\n")[0].strip()
    if len(first_line) > MAX_TITLE_CHARS:
        return f"{first_line[:MAX_TITLE_CHARS]}..."
    return first_line


def _check_title(title: str, entry: str, index: int, warnings: WarningCollector, label: str = "Publication") -> str:
    if len(title) < MIN_CLEAR_TITLE_CHARS:
        warnings.warning(
            "publications",
            f"{label} {index + 1}: title unclear - please review",
            index=index,
            raw=excerpt(entry),
        )
    return title or f"{label} Entry {index + 1}"


def parse_publication_entry(entry: str, index: int, warnings: WarningCollector) -> Publication:
    """
    Turn one publication entry into a Publication.

    Examples:
        'Razavi-Termeh, S. V., Sadeghi-Niaraki, A. (2024). "Cutting-edge strategies for
         flood mapping". Journal of Hydrology. IF: 6.4, Q1. DOI: 10.1016/j.jhydrol.2024.xxx'
            -> title="Cutting-edge strategies for flood mapping", year=2024, type="journal",
               authors="Razavi-Termeh, S. V., Sadeghi-Niaraki, A.",
               link="https://doi.org/10.1016/j.jhydrol.2024.xxx"
    """
    entry = entry.strip()
    window = scan_window(entry)

    year = extract_year(window)
    if year is None:
        warnings.warning(
            "publications",
            f"Publication {index + 1}: year not found - please review",
            index=index,
            raw=excerpt(entry),
        )

    doi = extract_doi(entry)
    quartile = _optional_group(QUARTILE_RE, window)

    return Publication(
        id=generate_stable_id(entry, index),
        title=_check_title(_publication_title(entry), entry, index, warnings),
        authors=extract_authors(entry),
        journal=tidy(extract_journal_name(_strip_author_prefix(entry))),
        year=year,
        volume=_optional_group(VOLUME_RE, window),
        issue=_optional_group(ISSUE_RE, window),
        pages=_optional_group(PAGES_RE, window),
        doi=doi,
        link=f"{DOI_LINK_PREFIX}{doi}" if doi else None,
        type=classify_publication_type(window),
        impact_factor=_optional_group(IMPACT_FACTOR_RE, window),
        quartile=f"Q{quartile}" if quartile else None,
        raw=entry,
    )


def parse_book_entry(entry: str, index: int, warnings: WarningCollector) -> Publication:
    """Books keep the publisher in `journal`; the title is quoted or sits before the publisher."""
    entry = entry.strip()
    window = scan_window(entry)

    year = extract_year(window)
    if year is None:
        warnings.warning(
            "books",
            f"Book {index + 1}: year not found",
            index=index,
            raw=excerpt(entry),
        )

    title = tidy(extract_first(BOOK_TITLE_RULES, window)) or tidy(entry.split(".")[0]) or ""
    publisher = PUBLISHER_RE.search(window)
    doi = extract_doi(entry)

    return Publication(
        id=generate_stable_id(entry, index),
        title=_check_title(title, entry, index, warnings, label="Book"),
        authors=extract_authors(entry),
        journal=tidy(publisher.group(0)) if publisher else None,
        year=year,
        doi=doi,
        link=f"{DOI_LINK_PREFIX}{doi}" if doi else None,
        type="book",
        raw=entry,
    )


def _parse_section(text, warnings, section_title, min_length, parse_entry) -> List[Publication]:
    entries = split_entries(text, min_length=min_length)
    logger.debug(f"Publications: {len(entries)} entries in '{section_title}'")
    if not entries:
        warnings.warning("publications", "No publication entries detected in text")
        return []
    return parse_each(entries, lambda e, i: parse_entry(e, i, warnings), warnings, section_title)


def parse_publications(
    text: str,
    warnings: WarningCollector,
    section_title: str = "Publications",
    min_length: int = 30,
) -> List[Publication]:
    """
    Parse a publications section.

    Args:
        text: Section content
        warnings: Collector for this parse call
        section_title: Title used to tag entry-level errors
        min_length: Shorter entries are dropped as noise

    Returns:
        One Publication per entry; an empty list plus a warning when the
        section has no recognisable entries
    """
    return _parse_section(text, warnings, section_title, min_length, parse_publication_entry)


def parse_books(
    text: str,
    warnings: WarningCollector,
    section_title: str = "Books",
    min_length: int = 30,
) -> List[Publication]:
    return _parse_section(text, warnings, section_title, min_length, parse_book_entry)
