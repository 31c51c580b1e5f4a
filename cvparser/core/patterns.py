"""
Pattern library shared by every extractor.

Two kinds of things live here:
- pure helpers over a text span (year, DOI, email, phone, URL, patent number)
- priority-ordered rule tables. A table is plain data: the first rule whose
  pattern matches decides the outcome, so precedence is the list order and
  nothing else. Tests pin the order where two rules can both match.

Patterns that can backtrack badly on long runs of letters are only ever run
over a bounded window (see `scan_window`).
"""

import hashlib
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Match, Optional, Pattern, Sequence, Tuple


# Backtracking-prone field patterns never see more than this many characters.
FIELD_SCAN_CHARS = 1000
# Longest single line the line-oriented scanners will look at.
MAX_LINE_CHARS = 4096

MIN_YEAR = 1900


# ============================================================================
# Rule tables
# ============================================================================

@dataclass(frozen=True)
class Rule:
    """One row of a priority table: pattern -> outcome (or a capture group to extract)."""
    pattern: Pattern[str]
    outcome: Any = None
    group: int = 0


def first_match(rules: Sequence[Rule], text: str) -> Optional[Tuple[Rule, Match[str]]]:
    for rule in rules:
        m = rule.pattern.search(text)
        if m:
            return rule, m
    return None


def classify(rules: Sequence[Rule], text: str, default: Any = None) -> Any:
    """Outcome of the first matching rule, else `default`."""
    hit = first_match(rules, text)
    return hit[0].outcome if hit else default


def extract_first(rules: Sequence[Rule], text: str) -> Optional[str]:
    """Captured text of the first matching rule (stripped), else None."""
    hit = first_match(rules, text)
    if not hit:
        return None
    rule, m = hit
    value = (m.group(rule.group) or "").strip()
    return value or None


def scan_window(text: str, limit: int = FIELD_SCAN_CHARS) -> str:
    return text[:limit]


FIELD_TRIM_CHARS = " \t,;:|-–"


def tidy(value: Optional[str]) -> Optional[str]:
    """Trim separators left over from a field match; empty becomes None."""
    if value is None:
        return None
    return value.strip(FIELD_TRIM_CHARS) or None


# ============================================================================
# Stable ids
# ============================================================================

SLUG_RE = re.compile(r"[^a-z0-9]+")


def generate_stable_id(text: str, index: Optional[int] = None) -> str:
    """
    Deterministic id: slug of the text plus a short content hash.

    Examples:
        generate_stable_id("Test Publication Title", 0) -> "test-publication-title-<8 hex>"
    """
    slug = SLUG_RE.sub("-", text.lower()).strip("-")[:30].strip("-")
    seed = text + ("" if index is None else str(index))
    digest = hashlib.md5(seed.encode("utf-8")).hexdigest()[:8]
    return f"{slug}-{digest}" if slug else f"entry-{digest}"


# ============================================================================
# Years, DOIs, contact tokens
# ============================================================================

PAREN_YEAR_RE = re.compile(r"\((\d{4})\)")
BARE_YEAR_RE = re.compile(r"(?<!\d)(\d{4})(?!\d)")
YEAR_RANGE_RE = re.compile(r"(\d{4})\s*[-–—]\s*(\d{4}|present)\b", re.IGNORECASE)


def _year_in_range(value: str) -> Optional[int]:
    year = int(value)
    if MIN_YEAR <= year <= date.today().year + 1:
        return year
    return None


def extract_year(text: str) -> Optional[int]:
    """
    First plausible publication/award year.

    A parenthesized year wins over a bare one; anything outside
    [1900, next year] is ignored.

    Examples:
        "(2024)" -> 2024
        "Published 2024 in Nature" -> 2024
        "Year 1800 is too old" -> None
    """
    for pattern in (PAREN_YEAR_RE, BARE_YEAR_RE):
        for m in pattern.finditer(text):
            year = _year_in_range(m.group(1))
            if year is not None:
                return year
    return None


def extract_year_range(text: str) -> Optional[Tuple[str, str]]:
    """`2008 - 2012` / `2022 – Present` -> (start, end) with `Present` capitalized."""
    m = YEAR_RANGE_RE.search(text)
    if not m:
        return None
    end = m.group(2)
    if end.lower() == "present":
        end = "Present"
    return m.group(1), end


DOI_RE = re.compile(r"\b(10\.\d{4,}(?:\.\d+)*/\S+)\b", re.IGNORECASE)


def extract_doi(text: str) -> Optional[str]:
    """'DOI: 10.1016/j.jhydrol.2024.xxx' -> '10.1016/j.jhydrol.2024.xxx'"""
    m = DOI_RE.search(text)
    return m.group(1) if m else None


EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
PHONE_RE = re.compile(r"(?:\+?\d{1,3}[-. ]?)?\(?\d{1,4}\)?[-. ]?\d{1,4}[-. ]?\d{1,9}")
PHONE_YEAR_RANGE_RE = re.compile(r"^(?:19|20)\d{2}\s*[-–]\s*(?:19|20)\d{2}$")
URL_RE = re.compile(r"https?://[^\s<>\"\]]+", re.IGNORECASE)
URL_TRAILING_PUNCT = ".,;:)'"
MIN_PHONE_DIGITS = 7


def extract_emails(text: str) -> List[str]:
    found: List[str] = []
    for line in text.split("\n"):
        if "@" not in line:
            continue
        found.extend(m.group(0) for m in EMAIL_RE.finditer(line[:MAX_LINE_CHARS]))
    return found


def extract_phone_numbers(text: str) -> List[str]:
    """Phone-shaped tokens with at least seven digits. Year ranges are not phones."""
    phones: List[str] = []
    for line in text.split("\n"):
        for m in PHONE_RE.finditer(line[:MAX_LINE_CHARS]):
            candidate = m.group(0).strip()
            if sum(c.isdigit() for c in candidate) < MIN_PHONE_DIGITS:
                continue
            if PHONE_YEAR_RANGE_RE.match(candidate):
                continue
            phones.append(candidate)
    return phones


def extract_urls(text: str) -> List[str]:
    return [m.group(0).rstrip(URL_TRAILING_PUNCT) for m in URL_RE.finditer(text)]


# ============================================================================
# Patents
# ============================================================================

# Application numbers come before registrations: "10-2020-0123456" also
# contains a registration-shaped "20-0123456".
PATENT_NUMBER_RULES: List[Rule] = [
    Rule(re.compile(r"\bUS\s*(?:Patent\s*(?:No\.?)?\s*)?(\d{1,3}[,.]?\d{3}[,.]?\d{3}(?:[A-Z]\d)?)", re.IGNORECASE), "us", 1),
    Rule(re.compile(r"(?<![\d-])(\d{2}-\d{4}-\d{7})(?![\d-])"), "korean_application", 1),
    Rule(re.compile(r"(?<![\d-])(\d{2}-\d{7})(?![\d-])"), "korean", 1),
    Rule(re.compile(r"(?:Patent|Application)\s*(?:No\.?|Number|#)?\s*:?\s*(\d[\d,./-]{4,}\d(?:[A-Z]\d)?)", re.IGNORECASE), "generic", 1),
]


def extract_patent_number(text: str) -> Optional[str]:
    """
    Examples:
        "US Patent (US11,816,804B2)" -> "11,816,804B2"
        "Patent No. 10-2356500" -> "10-2356500"
    """
    return extract_first(PATENT_NUMBER_RULES, text)


PATENT_STATUS_RULES: List[Rule] = [
    Rule(re.compile(r"registered|granted", re.IGNORECASE), "registered"),
    Rule(re.compile(r"pending|under examination|application", re.IGNORECASE), "pending"),
    Rule(re.compile(r"completed|issued", re.IGNORECASE), "completed"),
    Rule(re.compile(r"expired", re.IGNORECASE), "expired"),
]

PATENT_TYPE_RULES: List[Rule] = [
    Rule(re.compile(r"\bUS\b"), "international"),
    Rule(re.compile(r"international", re.IGNORECASE), "international"),
    Rule(re.compile(r"korea|\b10-\d{7}\b", re.IGNORECASE), "korean"),
]

PATENT_COUNTRY_RULES: List[Rule] = [
    Rule(re.compile(r"\bUS\b|United States|International"), "US"),
    Rule(re.compile(r"Korea|Korean|한국|\b10-\d{7}\b"), "Korea"),
]


def classify_patent_status(text: str) -> Optional[str]:
    return classify(PATENT_STATUS_RULES, text)


def classify_patent_type(text: str) -> str:
    return classify(PATENT_TYPE_RULES, text, "other")


def classify_patent_country(text: str) -> Optional[str]:
    return classify(PATENT_COUNTRY_RULES, text)


MONTH_NAMES = r"(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*"

PATENT_DATE_RULES: List[Rule] = [
    Rule(re.compile(MONTH_NAMES + r"\.?\s+\d{1,2},?\s+\d{4}", re.IGNORECASE)),
    Rule(re.compile(r"\d{4}[-./]\d{1,2}[-./]\d{1,2}")),
]


def extract_patent_date(text: str) -> Optional[str]:
    value = extract_first(PATENT_DATE_RULES, text)
    if value:
        return value
    year = extract_year(text)
    return str(year) if year else None


# ============================================================================
# Publications
# ============================================================================

PUBLICATION_TYPE_RULES: List[Rule] = [
    Rule(re.compile(r"conference|proceedings|symposium", re.IGNORECASE), "conference"),
    Rule(re.compile(r"book chapter|chapter in", re.IGNORECASE), "chapter"),
    Rule(re.compile(r"\bbooks?\b", re.IGNORECASE), "book"),
    Rule(re.compile(r"journal|\bscie\b|\bssci\b", re.IGNORECASE), "journal"),
]


def classify_publication_type(text: str) -> str:
    return classify(PUBLICATION_TYPE_RULES, text, "other")


JOURNAL_KEYWORDS = r"(?:Journal|Review|Letters|Science|Research|Studies)"

JOURNAL_RULES: List[Rule] = [
    Rule(re.compile(r"\b(?:published in|in:)\s*([^,.\d\n]+?)\s*(?:,|\.|Vol|Volume|\d|$)", re.IGNORECASE), "published_in", 1),
    Rule(re.compile(r"\b((?:Journal|Transactions|Proceedings) of [^,.\d\n]+)"), "journal_of", 1),
    Rule(re.compile(r"((?:[A-Z][A-Za-z&-]*[ ]){0,6}" + JOURNAL_KEYWORDS + r"\b[^,.\d\n]*)"), "keyword", 1),
]


def extract_journal_name(text: str) -> Optional[str]:
    return extract_first(JOURNAL_RULES, scan_window(text))


AUTHORS_RE = re.compile(r"^([^(\n]+?)\s*\(?\d{4}\)?")
AUTHOR_JOINER_RE = re.compile(r",|&|\band\b")


def extract_authors(text: str) -> Optional[str]:
    """Names in front of the year, accepted only if they look like a list of names."""
    m = AUTHORS_RE.search(scan_window(text))
    if not m:
        return None
    authors = m.group(1).strip().rstrip(",;:").strip()
    if authors and AUTHOR_JOINER_RE.search(authors):
        return authors
    return None


IMPACT_FACTOR_RE = re.compile(r"\bIF[:\s]*(\d+(?:\.\d+)?)", re.IGNORECASE)
QUARTILE_RE = re.compile(r"\bQ([1-4])\b", re.IGNORECASE)
VOLUME_RE = re.compile(r"\bVol(?:ume)?\.?\s*(\d+)", re.IGNORECASE)
ISSUE_RE = re.compile(r"\b(?:No\.?|Issue)\s*(\d+)", re.IGNORECASE)
PAGES_RE = re.compile(r"\bpp?\.?\s*(\d+\s*[-–]\s*\d+)")


# ============================================================================
# Education / positions / awards
# ============================================================================

# Post-doc sits above Ph.D.: "Post-Doctoral" contains "Doctor".
DEGREE_RULES: List[Rule] = [
    Rule(re.compile(r"\bPost-?\s?Doc(?:toral)?\b", re.IGNORECASE), "Post-Doctoral"),
    Rule(re.compile(r"\bPh\.?\s?D\b\.?|\bDoctor(?:ate|al)?\b", re.IGNORECASE), "Ph.D."),
    Rule(re.compile(r"\bM\.?\s?Sc\b\.?|\bMaster(?:'?s)?\b", re.IGNORECASE), "M.Sc."),
    Rule(re.compile(r"\bB\.?\s?Sc\b\.?|\bBachelor(?:'?s)?\b", re.IGNORECASE), "B.Sc."),
    Rule(re.compile(r"\bFellow(?:ship)?\b", re.IGNORECASE), "Fellowship"),
]

_STUDY_TAIL = r"\s+((?:[A-Za-z-]+ ){0,3}(?:Engineering|Science|Studies|Technology))\b"

# "in X" beats "of X": "Bachelor of Science in Civil Engineering" is Civil Engineering.
FIELD_OF_STUDY_RULES: List[Rule] = [
    Rule(re.compile(r"\bin" + _STUDY_TAIL, re.IGNORECASE), "in", 1),
    Rule(re.compile(r"\bof" + _STUDY_TAIL, re.IGNORECASE), "of", 1),
]

KNOWN_INSTITUTIONS = ("INHA", "KNTU", "Sejong")

_CAPITALIZED_PREFIX = r"(?:[A-Z][A-Za-z&'.-]*[ ]){0,3}"
_KNOWN_INSTITUTION_RE = re.compile(r"\b(?:" + "|".join(KNOWN_INSTITUTIONS) + r")\b[^,\n|;@]*")

# The keyword rule carries up to three capitalized words in front of the
# keyword, so "Seoul National University" wins over a bare "University".
INSTITUTION_RULES: List[Rule] = [
    Rule(re.compile(_CAPITALIZED_PREFIX + r"(?:University|Institute|College|School)\b[^,\n|;]*"), "keyword"),
    Rule(_KNOWN_INSTITUTION_RE, "known"),
    Rule(re.compile(r"([A-Z][a-zA-Z]+(?:[ ]+[A-Z][a-zA-Z]+)*[ ]+University)"), "name_university", 1),
]

ORGANIZATION_RULES: List[Rule] = [
    Rule(re.compile(_CAPITALIZED_PREFIX + r"(?:University|Institute|Company|Corporation)\b[^,\n|;]*"), "keyword"),
    Rule(re.compile(r"(?:[A-Z][A-Za-z&'.-]*[ ]){1,4}(?:Inc|Corp|Ltd|Co)\.?"), "suffix"),
    Rule(re.compile(r"\b(?:" + "|".join(KNOWN_INSTITUTIONS + ("HANCOM", "KSIC")) + r")\b[^,\n|;@]*"), "known"),
]

LOCATION_RULES: List[Rule] = [
    Rule(re.compile(r"\b(South Korea|Korea|Australia|Iran|USA|United States|Seoul|Incheon|Tehran)\b", re.IGNORECASE), "known", 1),
]

POSITION_TITLE_RULES: List[Rule] = [
    Rule(re.compile(
        r"^(?:(?:Associate|Assistant|Full|Adjunct|Visiting|Research|Senior)\s+)?"
        r"(?:Professor|Researcher|Research\s+\w+|Consultant|Manager|Director|Fellow)[^|\n,]*",
        re.IGNORECASE,
    ), "role"),
    Rule(re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+){0,2})\s*\|"), "piped", 1),
]

POSITION_TYPE_RULES: List[Rule] = [
    Rule(re.compile(r"professor|lecturer|teaching", re.IGNORECASE), "academic"),
    Rule(re.compile(r"research|fellow|scientist", re.IGNORECASE), "research"),
    Rule(re.compile(r"consultant|advisor", re.IGNORECASE), "consulting"),
    Rule(re.compile(r"manager|engineer|developer", re.IGNORECASE), "industry"),
]

AWARD_CATEGORY_RULES: List[Rule] = [
    Rule(re.compile(r"research|scientist|paper", re.IGNORECASE), "research"),
    Rule(re.compile(r"teaching|educator|instructor", re.IGNORECASE), "teaching"),
    Rule(re.compile(r"service|community|volunteer", re.IGNORECASE), "service"),
]

AWARD_ORGANIZATION_RULES: List[Rule] = [
    # Only the connective is case-insensitive; the name must be capitalized.
    Rule(re.compile(r"\b(?i:from)\s+(?:[Tt]he\s+)?([A-Z][^\n,]+)"), "from", 1),
    Rule(re.compile(r"\b(?i:(?:awarded\s+)?by)\s+(?:[Tt]he\s+)?([A-Z][^\n,]+)"), "by", 1),
    Rule(re.compile(r"((?:University|Institute|Foundation|Association|Government|Ministry)\b[^\n,]*)"), "keyword", 1),
]
