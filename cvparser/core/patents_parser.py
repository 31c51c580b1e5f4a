"""
Patent parsing: registered, pending and completed patents.

Korean and US numbering are both recognised (see PATENT_NUMBER_RULES in
patterns.py). Sub-headers such as "REGISTERED" inside a patents section are
removed before the entries are split.
"""

import logging
import re
from typing import List, Optional

from pydantic import BaseModel, Field

from cvparser.core.diagnostics import WarningCollector, excerpt
from cvparser.core.entries import parse_each, patent_lines, split_entries
from cvparser.core.patterns import (
    MONTH_NAMES,
    PATENT_NUMBER_RULES,
    Rule,
    classify_patent_country,
    classify_patent_status,
    classify_patent_type,
    extract_first,
    extract_patent_date,
    extract_patent_number,
    generate_stable_id,
    scan_window,
    tidy,
)
from cvparser.core.schemas import Patent

logger = logging.getLogger(__name__)


MIN_TITLE_CHARS = 20
MAX_TITLE_CHARS = 200
MIN_LINE_SPLIT_ENTRY = 30

PATENT_SUBHEADER_RE = re.compile(
    r"^[ \t]*(?:(?:REGISTERED|COMPLETED|PENDING)[ \t]+)?(?:PATENTS?|REGISTERED|COMPLETED|PENDING)[ \t:]*$\n?",
    re.IGNORECASE | re.MULTILINE,
)

# ===== TITLE RULES (first match wins) =====

PATENT_TITLE_RULES: List[Rule] = [
    Rule(re.compile(r"Title:\s*\"?([^\"\n]+)\"?", re.IGNORECASE), "labelled", 1),
    Rule(re.compile(r"\"([^\"\n]{20,})\""), "quoted", 1),
    Rule(re.compile(r"“([^”\n]{20,})”"), "curly_quoted", 1),
]

# Tokens removed before the first remaining sentence is taken as the title.
TITLE_NOISE_RES = [rule.pattern for rule in PATENT_NUMBER_RULES] + [
    re.compile(r"\bUS\s*Patent\s*(?:No\.?)?\s*\(?\s*(?:US)?", re.IGNORECASE),
    re.compile(r"\bPatent\s*(?:No\.?)?\s*:?", re.IGNORECASE),
    re.compile(r"\b(?:Registered|Granted|Pending|Completed|Issued|Application)\b(?:\s+on\b)?", re.IGNORECASE),
    re.compile(MONTH_NAMES + r"\.?\s+\d{1,2},?\s+\d{4}", re.IGNORECASE),
    re.compile(r"[()]"),
]

INVENTORS_LABEL_RE = re.compile(r"Inventors?:\s*([^\n]+)", re.IGNORECASE)
_NAME = r"[A-Z][a-z]+(?:-[A-Z][a-z]+)?(?:\s+[A-Z][a-z]+(?:-[A-Z][a-z]+)?){1,3}"
# Two or more comma separated person-shaped names.
INVENTOR_NAMES_RE = re.compile(r"(" + _NAME + r"(?:\s*,\s*" + _NAME + r")+)")


class PatentGroups(BaseModel):
    registered: List[Patent] = Field(default_factory=list)
    pending: List[Patent] = Field(default_factory=list)
    other: List[Patent] = Field(default_factory=list)


def _stripped_title(entry: str) -> Optional[str]:
    text = entry
    for pattern in TITLE_NOISE_RES:
        text = pattern.sub(" ", text)
    for sentence in re.split(r"[.\n]", text):
        candidate = tidy(" ".join(sentence.split()))
        if candidate and len(candidate) > MIN_TITLE_CHARS:
            return candidate[:MAX_TITLE_CHARS]
    return None


def _patent_title(entry: str, index: int, warnings: WarningCollector) -> str:
    window = scan_window(entry)
    title = tidy(extract_first(PATENT_TITLE_RULES, window)) or _stripped_title(window)
    if title:
        return title
    warnings.warning(
        "patents",
        f"Patent {index + 1}: title unclear - please review",
        index=index,
        raw=excerpt(entry),
    )
    return f"Patent Entry {index + 1}"


def _inventors(entry: str) -> Optional[str]:
    m = INVENTORS_LABEL_RE.search(entry)
    if m:
        return tidy(m.group(1))
    m = INVENTOR_NAMES_RE.search(scan_window(entry))
    return m.group(1) if m else None


def parse_patent_entry(entry: str, index: int, warnings: WarningCollector) -> Patent:
    """
    Turn one patent entry into a Patent.

    Examples:
        "US Patent (US11,816,804B2) Registered Nov 14, 2023" -> number="11,816,804B2",
            country="US", type="international", status="registered", date="Nov 14, 2023"
        "Patent No. 10-2356500 ..." -> number="10-2356500", type="korean"
    """
    entry = entry.strip()
    window = scan_window(entry)

    number = extract_patent_number(window)
    if number is None:
        warnings.warning(
            "patents",
            f"Patent {index + 1}: patent number not found - please review",
            index=index,
            raw=excerpt(entry),
        )

    return Patent(
        id=generate_stable_id(entry, index),
        title=_patent_title(entry, index, warnings),
        inventors=_inventors(entry),
        number=number,
        country=classify_patent_country(window),
        date=extract_patent_date(window),
        status=classify_patent_status(window),
        type=classify_patent_type(window),
        raw=entry,
    )


def split_patent_entries(text: str, min_length: int = 20) -> List[str]:
    cleaned = PATENT_SUBHEADER_RE.sub("", text).strip()
    entries = split_entries(cleaned, min_length=min_length)
    if len(entries) < 2:
        by_line = [e for e in (patent_lines(cleaned) or []) if len(e) > MIN_LINE_SPLIT_ENTRY]
        if len(by_line) > len(entries):
            logger.debug(f"Patents: line-shape split found {len(by_line)} entries")
            entries = by_line
    return entries


def parse_patents(
    text: str,
    warnings: WarningCollector,
    section_title: str = "Patents",
    min_length: int = 20,
) -> List[Patent]:
    """
    Parse a patents section.

    Args:
        text: Section content
        warnings: Collector for this parse call
        section_title: Title used to tag entry-level errors
        min_length: Shorter entries are dropped as noise

    Returns:
        One Patent per entry; an empty list plus an info warning when no
        entry could be found
    """
    entries = split_patent_entries(text, min_length)
    if not entries:
        warnings.info("patents", "No patent entries detected in text")
        return []
    return parse_each(entries, lambda e, i: parse_patent_entry(e, i, warnings), warnings, section_title)


def categorize_patents(patents: List[Patent]) -> PatentGroups:
    """Completed patents count as registered; anything without a known status is `other`."""
    groups = PatentGroups()
    for patent in patents:
        if patent.status in ("registered", "completed"):
            groups.registered.append(patent)
        elif patent.status == "pending":
            groups.pending.append(patent)
        else:
            groups.other.append(patent)
    return groups
