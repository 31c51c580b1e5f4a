"""
Research parsing: projects, grants and research interests.
"""

import logging
import re
from typing import List, Optional, Tuple

from cvparser.core.diagnostics import WarningCollector, excerpt
from cvparser.core.entries import parse_each, split_entries
from cvparser.core.patterns import extract_year_range, generate_stable_id, scan_window, tidy
from cvparser.core.schemas import Grant, ResearchInterest, ResearchProject

logger = logging.getLogger(__name__)


MIN_PROJECT_CHARS = 30
MIN_GRANT_CHARS = 30

# ===== PROJECTS =====

PROJECT_SPLIT_RE = re.compile(r"\n(?=[A-Z][^\n|]*\|)")
FUNDING_AMOUNT_RE = re.compile(r"\$\s?[\d,]+(?:\.\d+)?|\b\d[\d,]*\s*USD\b", re.IGNORECASE)
FUNDING_LABEL_RE = re.compile(r"\b(?:Funded by|Funding(?: Agency)?)\s*:\s*([^\n]+)", re.IGNORECASE)
ROLE_LABEL_RE = re.compile(r"\bRole\s*:\s*([^\n]+)", re.IGNORECASE)

# ===== GRANTS =====

PROJECT_TITLE_SPLIT_RE = re.compile(r"(?=Project title\s*:)", re.IGNORECASE)
FUNDING_SPLIT_RE = re.compile(r"(?=^Funding\s*:)", re.IGNORECASE | re.MULTILINE)
GRANT_TITLE_RE = re.compile(r"Project title\s*:\s*([^\n]+)", re.IGNORECASE)
GRANT_AMOUNT_RE = re.compile(r"\bFunding\s*:\s*([^\n]+)", re.IGNORECASE)
GRANT_AGENCY_RE = re.compile(r"Funding Agency\s*:\s*([^\n]+)", re.IGNORECASE)
GRANT_DURATION_RE = re.compile(r"Duration\s*:\s*([^\n]+)", re.IGNORECASE)

# ===== INTERESTS =====

# (area, keywords) - an area is listed when any keyword appears as a whole word.
RESEARCH_AREAS: List[Tuple[str, Tuple[str, ...]]] = [
    ("Geo-AI", ("Geospatial AI", "Spatial Computing", "GeoAI")),
    ("Extended Reality (XR)", ("Virtual Reality", "Augmented Reality", "Mixed Reality", "Metaverse")),
    ("Human-Computer Interaction", ("HCI", "User Interface", "User Experience")),
    ("Internet of Things", ("IoT", "Ubiquitous Computing", "Sensors")),
    ("Machine Learning", ("Deep Learning", "AI", "Neural Networks")),
    ("Natural Language Processing", ("NLP", "LLM", "Language Models")),
    ("GIS & Spatial Analysis", ("Geographic Information Systems", "Spatial Data")),
]

_AREA_RES = [
    (name, keywords, re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b", re.IGNORECASE))
    for name, keywords in RESEARCH_AREAS
]


def _labelled(pattern: "re.Pattern[str]", text: str) -> Optional[str]:
    m = pattern.search(text)
    return tidy(m.group(1)) if m else None


def parse_project_entry(entry: str, index: int) -> ResearchProject:
    """
    Examples:
        "Smart City Digital Twin | NRF Korea | 2021 - Present | $120,000\\nBuilt a 3D model"
            -> title="Smart City Digital Twin", period="2021 - Present", status="ongoing",
               funding_amount="$120,000", description="Built a 3D model"
    """
    entry = entry.strip()
    lines = entry.split("\n")
    title = tidy(lines[0].split("|")[0]) or lines[0].strip()

    period = None
    status = None
    year_range = extract_year_range(scan_window(entry))
    if year_range:
        period = f"{year_range[0]} - {year_range[1]}"
        status = "ongoing" if year_range[1] == "Present" else "completed"

    amount = FUNDING_AMOUNT_RE.search(scan_window(entry))

    return ResearchProject(
        id=generate_stable_id(title, index),
        title=title,
        description="\n".join(lines[1:]).strip() or None,
        period=period,
        funding=_labelled(FUNDING_LABEL_RE, entry),
        funding_amount=amount.group(0) if amount else None,
        role=_labelled(ROLE_LABEL_RE, entry),
        status=status,
        raw=entry,
    )


def parse_research_section(
    text: str,
    warnings: WarningCollector,
    section_title: str = "Research Projects",
) -> List[ResearchProject]:
    """
    Parse research projects.

    Each project starts at a capitalized line with `|` separated fields; the
    part before the first `|` is the title.
    """
    chunks = [c.strip() for c in PROJECT_SPLIT_RE.split(text)]
    entries = [c for c in chunks if len(c) >= MIN_PROJECT_CHARS]
    logger.debug(f"Research: {len(entries)} projects in '{section_title}'")
    return parse_each(entries, parse_project_entry, warnings, section_title)


def _split_grants(text: str) -> List[str]:
    if GRANT_TITLE_RE.search(text):
        chunks = [c for c in PROJECT_TITLE_SPLIT_RE.split(text) if GRANT_TITLE_RE.search(c)]
    elif FUNDING_SPLIT_RE.search(text):
        chunks = FUNDING_SPLIT_RE.split(text)
    else:
        return split_entries(text, min_length=MIN_GRANT_CHARS)
    return [c.strip() for c in chunks if len(c.strip()) >= MIN_GRANT_CHARS]


def parse_grant_entry(entry: str, index: int, warnings: WarningCollector) -> Grant:
    entry = entry.strip()
    title = _labelled(GRANT_TITLE_RE, entry)
    if title is None:
        title = tidy(entry.split("\n")[0]) or f"Grant Entry {index + 1}"
        warnings.info(
            "grants",
            f"Grant {index + 1}: no project title label - using first line",
            index=index,
            raw=excerpt(entry),
        )

    period = _labelled(GRANT_DURATION_RE, entry)
    if period is None:
        year_range = extract_year_range(entry)
        period = f"{year_range[0]} - {year_range[1]}" if year_range else None

    return Grant(
        id=generate_stable_id(title, index),
        title=title,
        funding_agency=_labelled(GRANT_AGENCY_RE, entry),
        amount=_labelled(GRANT_AMOUNT_RE, entry),
        period=period,
        role=_labelled(ROLE_LABEL_RE, entry),
        raw=entry,
    )


def parse_grants_section(
    text: str,
    warnings: WarningCollector,
    section_title: str = "Research Grants",
) -> List[Grant]:
    """
    Parse grant blocks.

    Blocks start at `Project title:` (or at `Funding:` when no block is
    titled) and carry `Funding:`, `Funding Agency:`, `Duration:` and `Role:`
    lines; a bare year range stands in for a missing duration.
    """
    entries = _split_grants(text)
    logger.debug(f"Grants: {len(entries)} entries in '{section_title}'")
    return parse_each(entries, lambda e, i: parse_grant_entry(e, i, warnings), warnings, section_title)


def extract_research_interests(text: str) -> List[ResearchInterest]:
    """Known research areas whose keywords occur anywhere in the CV."""
    interests = []
    for index, (name, keywords, pattern) in enumerate(_AREA_RES):
        if pattern.search(text):
            interests.append(
                ResearchInterest(
                    id=generate_stable_id(name, index),
                    name=name,
                    description=f"Research in {name} and related technologies",
                    keywords=list(keywords),
                )
            )
    return interests
