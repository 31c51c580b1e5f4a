"""
Section segmentation.

Walks normalized CV text line by line and cuts it into titled sections. A
header line closes the section that is open and starts the next one; every
other line is content. Text before the first header is not part of any
section (the aggregator's fallback scans look at it).
"""

import logging
import re
from typing import List, Optional, Tuple

from cvparser.core.schemas import Section, SectionType

logger = logging.getLogger(__name__)


KNOWN_TYPE_CONFIDENCE = 0.8
UNKNOWN_TYPE_CONFIDENCE = 0.5

MAX_HEADER_CHARS = 100
MAX_HEADER_WORDS = 10

# A header must contain one of these (case-insensitive substring). Plural
# forms only: "Best Paper Award" or "Korean Patent No. ..." are entries.
# Singular forms belong in SECTION_TYPE_TABLE, which only types headers.
HEADER_KEYWORDS = (
    "education", "experience", "publications", "patents", "research", "awards",
    "skills", "contact", "students", "grants", "teaching", "services", "workshops",
    "professional", "academic", "honors", "books", "journal", "conference",
    "membership", "leadership", "summary", "overview", "qualifications",
    "appointments", "supervision", "interests",
)

# Lines with any of these shapes are entries, never headers.
HEADER_DISQUALIFIERS = [
    re.compile(r"^\s*(?:\d{1,3}[.)]|[•●▪◦·*-])\s"),  # list item
    re.compile(r"\|"),                                # field separator
    re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)"),       # dated line
    re.compile(r"https?://|www\.|@"),                 # link or address
]

# Ordered: the first row with a keyword contained in the header wins.
SECTION_TYPE_TABLE: List[Tuple[SectionType, Tuple[str, ...]]] = [
    (SectionType.SERVICES, ("journal and conference review", "reviewer")),
    (SectionType.SUMMARY, ("professional summary", "summary of qualifications", "summary", "overview")),
    (SectionType.PROFILE, ("profile",)),
    (SectionType.STUDENTS, ("student", "supervision", "mentee", "advisee")),
    (SectionType.GRANTS, ("research grant", "grant", "funding")),
    (SectionType.WORKSHOPS, ("workshop", "exhibition", "presentation")),
    (SectionType.PATENTS, ("patent",)),
    (SectionType.PUBLICATIONS, (
        "journal paper", "publication", "article", "peer-reviewed", "book", "conference", "journal",
    )),
    (SectionType.RESEARCH, ("research project", "research interest", "research area")),
    (SectionType.EDUCATION, ("education", "academic qualification", "degree", "ph.d", "phd", "m.sc", "b.sc")),
    (SectionType.AWARDS, ("award", "honor", "recognition", "achievement")),
    (SectionType.SKILLS, ("skill", "expertise", "competenc", "research leadership")),
    (SectionType.CONTACT, ("contact", "email", "phone", "address", "website", "linkedin")),
    (SectionType.EXPERIENCE, (
        "professional work experience", "academic appointment", "experience", "appointment",
        "position", "employment", "work", "professor",
    )),
    (SectionType.SERVICES, ("teaching", "editorial", "review", "committee", "service", "membership")),
    (SectionType.RESEARCH, ("research",)),
]


def _is_prose(line: str) -> bool:
    if line.isupper() or line.endswith(":"):
        return False
    return len(line.split()) > MAX_HEADER_WORDS or line.endswith(".")


def is_section_header(line: str) -> bool:
    """
    Decide whether a single line opens a new section.

    Args:
        line: One line of normalized text

    Returns:
        True if the line carries a section keyword, has a header shape
        (upper-case, colon-terminated or short) and none of the entry shapes
    """
    stripped = line.strip()
    if not stripped:
        return False

    lowered = stripped.lower()
    if not any(keyword in lowered for keyword in HEADER_KEYWORDS):
        return False

    if any(p.search(stripped) for p in HEADER_DISQUALIFIERS):
        return False
    if _is_prose(stripped):
        return False

    return stripped.isupper() or stripped.endswith(":") or len(stripped) < MAX_HEADER_CHARS


def detect_section_type(line: str) -> SectionType:
    """Map a header line to its section type; UNKNOWN when no row matches."""
    lowered = line.strip().lower()
    for section_type, keywords in SECTION_TYPE_TABLE:
        if any(keyword in lowered for keyword in keywords):
            return section_type
    return SectionType.UNKNOWN


def _close(title: str, section_type: SectionType, lines: List[str]) -> Section:
    confidence = UNKNOWN_TYPE_CONFIDENCE if section_type is SectionType.UNKNOWN else KNOWN_TYPE_CONFIDENCE
    return Section(type=section_type, title=title, content="\n".join(lines).strip(), confidence=confidence)


def split_into_sections(text: str) -> List[Section]:
    """
    Cut normalized text into sections.

    Examples:
        "EDUCATION\\nPh.D. ...\\nPUBLICATIONS\\n1. ..." ->
            [Section(type=education, ...), Section(type=publications, ...)]
    """
    sections: List[Section] = []
    title: Optional[str] = None
    section_type = SectionType.UNKNOWN
    buffer: List[str] = []
    skipped = 0

    for line in text.split("\n"):
        if is_section_header(line):
            if title is not None:
                sections.append(_close(title, section_type, buffer))
            title = line.strip().rstrip(":").strip()
            section_type = detect_section_type(line)
            buffer = []
            logger.debug(f"SECTION HEADER: '{title}' -> {section_type.value}")
        elif title is not None:
            buffer.append(line)
        elif line.strip():
            skipped += 1

    if title is not None:
        sections.append(_close(title, section_type, buffer))

    if skipped:
        logger.debug(f"{skipped} line(s) before the first section header left to fallback scans")
    return sections
