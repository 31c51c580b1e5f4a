"""
Aggregation: converter output -> complete CV record.

Normalizes the text, splits it into sections, dispatches every section to its
extractor, runs fallback rescans for what the sections did not yield, and
assembles the record with counts and metadata. Content problems only ever
become warnings; the one hard failure is a caller passing non-text input.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Sequence

from cvparser.core.awards_parser import parse_awards
from cvparser.core.contact_parser import merge_contact, parse_contact
from cvparser.core.diagnostics import WarningCollector
from cvparser.core.education_parser import parse_education
from cvparser.core.experience_parser import parse_experience
from cvparser.core.patents_parser import parse_patents
from cvparser.core.patterns import classify_publication_type
from cvparser.core.profile_parser import extract_profile_name, extract_profile_title, name_tokens
from cvparser.core.publications_parser import parse_books, parse_publications
from cvparser.core.research_parser import extract_research_interests, parse_grants_section, parse_research_section
from cvparser.core.schemas import (
    About,
    Award,
    Contact,
    ConversionResult,
    ConverterMessage,
    Counts,
    CVRecord,
    Education,
    Grant,
    ParseResult,
    Patent,
    Position,
    Profile,
    Publication,
    RecordMeta,
    Research,
    ResearchProject,
    Section,
    SectionType,
)
from cvparser.core.sections import split_into_sections
from cvparser.core.settings import ParserSettings, get_settings
from cvparser.core.text_normalization import normalize_whitespace

logger = logging.getLogger(__name__)


SUMMARY_CHARS = 500
BRIEF_CHARS = 300
UNKNOWN_TITLE_CHARS = 50

UNMAPPED_MIN_CHARS = 100
PUBLICATION_ROUTE_MIN_CHARS = 200
PATENT_ROUTE_MIN_CHARS = 100
RESEARCH_ROUTE_MIN_CHARS = 100
PUBLICATION_FALLBACK_MIN_CHARS = 100
PATENT_FALLBACK_MIN_CHARS = 50

BOILERPLATE_TITLES = ("header", "footer", "page", "table of contents", "references", "appendix")
PUBLICATION_TITLE_WORDS = ("journal", "paper", "publication", "book", "conference")
RESEARCH_TITLE_WORDS = ("research project", "grant", "funding")
INTEREST_TITLE_WORDS = ("interest", "area")

# ===== FALLBACK SPANS =====

PUBLICATION_SPAN_STARTS: List[Pattern[str]] = [
    re.compile(r"^[ \t]*JOURNAL PAPERS\b[^\n]*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^[ \t]*PUBLICATIONS\b[^\n]*$", re.IGNORECASE | re.MULTILINE),
]
PATENT_SPAN_STARTS: List[Pattern[str]] = [
    re.compile(r"^[ \t]*PATENTS\b[^\n]*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^[ \t]*(?:REGISTERED|COMPLETED)[ \t]*PATENTS?\b[^\n]*$", re.IGNORECASE | re.MULTILINE),
]
# The next upper-case header line ends a fallback span.
SPAN_END_RE = re.compile(
    r"^[ \t]*(?:(?:CONFERENCE|PATENTS|PUBLICATIONS|BOOKS|AWARDS|SKILLS|TEACHING|WORKSHOPS?|SERVICES?)\b"
    r"|[A-Z][A-Z &]{2,}[ \t:]*$)",
    re.MULTILINE,
)

# ===== STUDENTS =====

STUDENT_COUNT_RE = re.compile(
    r"(?:supervised?|mentored?)\s*(?:more than\s+)?(\d+)\+?\s*(?:Master|PhD|graduate)",
    re.IGNORECASE,
)
STUDENT_ROSTER_START_RE = re.compile(r"(?:Master|PhD)\s*Students?", re.IGNORECASE)
STUDENT_ROSTER_END_RE = re.compile(r"\n[A-Z]{2,}|\n{3}|Professional")
STUDENT_NAME_RE = re.compile(r"[A-Z][a-z]+(?:[ ]+[A-Z][a-z]+){1,3}[ ]*[-–]")


@dataclass
class _Collected:
    """What the section pass has found so far."""
    summary: Optional[str] = None
    education: List[Education] = field(default_factory=list)
    positions: List[Position] = field(default_factory=list)
    awards: List[Award] = field(default_factory=list)
    publications: List[Publication] = field(default_factory=list)
    patents: List[Patent] = field(default_factory=list)
    projects: List[ResearchProject] = field(default_factory=list)
    grants: List[Grant] = field(default_factory=list)
    contact: Optional[Contact] = None


@dataclass
class _Context:
    warnings: WarningCollector
    settings: ParserSettings
    name_tokens: Sequence[str]


Handler = Callable[[Section, _Collected, _Context], None]


# ============================================================================
# Section handlers
# ============================================================================

def _handle_summary(section: Section, found: _Collected, ctx: _Context) -> None:
    if found.summary is None and section.content:
        found.summary = section.content


def _handle_education(section: Section, found: _Collected, ctx: _Context) -> None:
    found.education.extend(
        parse_education(section.content, ctx.warnings, section.title, ctx.settings.min_entry_length)
    )


def _handle_experience(section: Section, found: _Collected, ctx: _Context) -> None:
    found.positions.extend(
        parse_experience(section.content, ctx.warnings, section.title, ctx.settings.min_entry_length)
    )


def _handle_publications(section: Section, found: _Collected, ctx: _Context) -> None:
    title = section.title.lower()
    parse = parse_books if "book" in title and "journal" not in title else parse_publications
    publications = parse(section.content, ctx.warnings, section.title, ctx.settings.min_publication_length)

    # Entries that do not say what they are take the section's kind.
    section_kind = classify_publication_type(section.title)
    for publication in publications:
        if publication.type == "other":
            publication.type = section_kind
    found.publications.extend(publications)


def _handle_patents(section: Section, found: _Collected, ctx: _Context) -> None:
    found.patents.extend(parse_patents(section.content, ctx.warnings, section.title, ctx.settings.min_entry_length))


def _handle_awards(section: Section, found: _Collected, ctx: _Context) -> None:
    found.awards.extend(parse_awards(section.content, ctx.warnings, section.title, ctx.settings.min_entry_length))


def _handle_grants(section: Section, found: _Collected, ctx: _Context) -> None:
    found.grants.extend(parse_grants_section(section.content, ctx.warnings, section.title))


def _handle_research(section: Section, found: _Collected, ctx: _Context) -> None:
    if any(word in section.title.lower() for word in INTEREST_TITLE_WORDS):
        logger.debug(f"'{section.title}' left to the research-interest scan")
        return
    found.projects.extend(parse_research_section(section.content, ctx.warnings, section.title))


def _handle_contact(section: Section, found: _Collected, ctx: _Context) -> None:
    contact = parse_contact(section.content, ctx.warnings, ctx.name_tokens)
    found.contact = contact if found.contact is None else merge_contact(found.contact, contact)


def _handle_unmapped(section: Section, found: _Collected, ctx: _Context) -> None:
    """
    Sections with no record field of their own.

    Titles that still name publications, patents or research projects are
    routed to those extractors; anything else with real content is reported.
    """
    title = section.title.lower()
    size = len(section.content)

    if any(word in title for word in PUBLICATION_TITLE_WORDS) and size > PUBLICATION_ROUTE_MIN_CHARS:
        logger.debug(f"Routing '{section.title}' to publications")
        _handle_publications(section, found, ctx)
    elif "patent" in title and size > PATENT_ROUTE_MIN_CHARS:
        logger.debug(f"Routing '{section.title}' to patents")
        _handle_patents(section, found, ctx)
    elif any(word in title for word in RESEARCH_TITLE_WORDS) and size > RESEARCH_ROUTE_MIN_CHARS:
        logger.debug(f"Routing '{section.title}' to research projects")
        found.projects.extend(parse_research_section(section.content, ctx.warnings, section.title))
    elif size > UNMAPPED_MIN_CHARS and not any(word in title for word in BOILERPLATE_TITLES):
        ctx.warnings.info(
            "unknown_section",
            f"Unrecognized section: \"{section.title[:UNKNOWN_TITLE_CHARS]}\" - please review",
        )


SECTION_HANDLERS: Dict[SectionType, Handler] = {
    SectionType.PROFILE: _handle_summary,
    SectionType.SUMMARY: _handle_summary,
    SectionType.EDUCATION: _handle_education,
    SectionType.EXPERIENCE: _handle_experience,
    SectionType.RESEARCH: _handle_research,
    SectionType.PUBLICATIONS: _handle_publications,
    SectionType.PATENTS: _handle_patents,
    SectionType.AWARDS: _handle_awards,
    SectionType.SKILLS: _handle_unmapped,
    SectionType.CONTACT: _handle_contact,
    SectionType.STUDENTS: _handle_unmapped,
    SectionType.GRANTS: _handle_grants,
    SectionType.WORKSHOPS: _handle_unmapped,
    SectionType.SERVICES: _handle_unmapped,
    SectionType.UNKNOWN: _handle_unmapped,
}

_unhandled = set(SectionType) - set(SECTION_HANDLERS)
if _unhandled:
    raise RuntimeError(f"No handler registered for section types: {sorted(t.value for t in _unhandled)}")


# ============================================================================
# Fallback scans
# ============================================================================

def find_span(text: str, starts: Iterable[Pattern[str]]) -> Optional[str]:
    """
    Text between the first start header found and the next upper-case header.

    Start patterns are tried in order; the header line itself is excluded.
    """
    for start_re in starts:
        m = start_re.search(text)
        if not m:
            continue
        end = SPAN_END_RE.search(text, m.end() + 1)
        return text[m.end():end.start() if end else len(text)].strip()
    return None


def _contact_fallback(text: str, found: _Collected, ctx: _Context) -> Contact:
    if found.contact is not None and found.contact.email:
        return found.contact

    logger.warning(f"No contact email from sections; scanning first {ctx.settings.contact_scan_chars} characters")
    scratch = WarningCollector()
    head = parse_contact(text[:ctx.settings.contact_scan_chars], scratch, ctx.name_tokens)
    if found.contact is None:
        ctx.warnings.extend(scratch)
        return head
    return merge_contact(found.contact, head)


def _publication_fallback(text: str, found: _Collected, ctx: _Context) -> None:
    if found.publications:
        return
    span = find_span(text, PUBLICATION_SPAN_STARTS)
    if span and len(span) > PUBLICATION_FALLBACK_MIN_CHARS:
        logger.warning("No publications from sections; rescanning publication span")
        scratch = WarningCollector()
        publications = parse_publications(span, scratch, "Publications", ctx.settings.min_publication_length)
        if publications:
            found.publications = publications
            ctx.warnings.extend(scratch)
            return
    ctx.warnings.info("publications", "No publications section found")


def _patent_fallback(text: str, found: _Collected, ctx: _Context) -> None:
    if found.patents:
        return
    span = find_span(text, PATENT_SPAN_STARTS)
    if span and len(span) > PATENT_FALLBACK_MIN_CHARS:
        logger.warning("No patents from sections; rescanning patent span")
        scratch = WarningCollector()
        patents = parse_patents(span, scratch, "Patents", ctx.settings.min_entry_length)
        if patents:
            found.patents = patents
            ctx.warnings.extend(scratch)
            return
    ctx.warnings.info("patents", "No patents section found")


# ============================================================================
# Record assembly
# ============================================================================

def count_students(text: str) -> int:
    """
    Best-effort number of supervised students.

    An explicit "supervised 12 Master ..." statement wins; otherwise names
    followed by a dash are counted in a "Master/PhD Students" roster.
    """
    m = STUDENT_COUNT_RE.search(text)
    if m:
        return int(m.group(1))

    start = STUDENT_ROSTER_START_RE.search(text)
    if not start:
        return 0
    end = STUDENT_ROSTER_END_RE.search(text, start.end())
    roster = text[start.start():end.start() if end else len(text)]
    return len(STUDENT_NAME_RE.findall(roster))


def ensure_unique_ids(items: Sequence) -> None:
    """Give repeated ids a deterministic `-2`, `-3`, ... suffix in list order."""
    used = set()
    for item in items:
        candidate = item.id
        n = 1
        while candidate in used:
            n += 1
            candidate = f"{item.id}-{n}"
        used.add(candidate)
        item.id = candidate


def _resolve_name(text: str, warnings: WarningCollector, settings: ParserSettings) -> str:
    name = extract_profile_name(text) or settings.default_profile_name
    if name:
        return name
    warnings.warning("profile", "Profile name not found - please review")
    return ""


def _dispatch(sections: List[Section], found: _Collected, ctx: _Context) -> None:
    for section in sections:
        handler = SECTION_HANDLERS[section.type]
        logger.debug(f"Dispatching '{section.title}' ({section.type.value}) to {handler.__name__}")
        try:
            handler(section, found, ctx)
        except Exception as exc:
            logger.exception(f"Section '{section.title}' failed")
            ctx.warnings.error(section.type.value, f"Error parsing section \"{section.title}\": {exc}")


def parse_cv(
    conversion: ConversionResult,
    source_file_name: str,
    settings: Optional[ParserSettings] = None,
    now: Optional[datetime] = None,
) -> ParseResult:
    """
    Parse converter output into a CV record.

    Args:
        conversion: Text, HTML and messages from the document converter
        source_file_name: Name of the uploaded file, recorded in meta
        settings: Parser tunables; defaults to get_settings()
        now: Timestamp for meta.parsed_at; defaults to the current UTC time

    Returns:
        ParseResult with the record and every warning raised on the way

    Raises:
        TypeError: if the conversion text or HTML is not a string
    """
    if not isinstance(conversion, ConversionResult):
        raise TypeError(f"conversion must be a ConversionResult, got {type(conversion).__name__}")
    if not isinstance(conversion.text, str) or not isinstance(conversion.html, str):
        raise TypeError("conversion text and html must be strings")

    settings = settings or get_settings()
    warnings = WarningCollector()
    warnings.fold_converter_messages(conversion.messages)

    text = normalize_whitespace(conversion.text)
    sections = split_into_sections(text)
    logger.debug(f"{len(sections)} sections in '{source_file_name}'")

    name = _resolve_name(text, warnings, settings)
    ctx = _Context(warnings, settings, settings.subject_name_tokens or tuple(name_tokens(name)))

    found = _Collected()
    _dispatch(sections, found, ctx)

    contact = _contact_fallback(text, found, ctx)
    _publication_fallback(text, found, ctx)
    _patent_fallback(text, found, ctx)

    interests = extract_research_interests(text)
    for items in (found.education, found.positions, found.awards, found.publications,
                  found.patents, found.projects, found.grants, interests):
        ensure_unique_ids(items)

    summary = found.summary
    record = CVRecord(
        profile=Profile(
            name=name,
            title=extract_profile_title(text),
            summary=summary[:SUMMARY_CHARS] if summary else None,
        ),
        about=About(
            brief=summary[:BRIEF_CHARS] if summary else None,
            full=summary,
            education=found.education,
            positions=found.positions,
            awards=found.awards,
        ),
        research=Research(interests=interests, projects=found.projects, grants=found.grants),
        publications=found.publications,
        patents=found.patents,
        contact=contact,
        raw_html=conversion.html or None,
        counts=Counts(
            publications=len(found.publications),
            patents=len(found.patents),
            projects=len(found.projects),
            awards=len(found.awards),
            students=count_students(text),
        ),
        meta=RecordMeta(
            source_file_name=source_file_name,
            parsed_at=(now or datetime.now(timezone.utc)).isoformat(),
            parser_version=settings.parser_version,
            warnings=warnings.as_meta_strings(),
        ),
    )
    return ParseResult(data=record, warnings=warnings.as_list())


def parse_text(
    text: str,
    source_file_name: str = "cv.txt",
    html: str = "",
    messages: Optional[List[ConverterMessage]] = None,
    settings: Optional[ParserSettings] = None,
    now: Optional[datetime] = None,
) -> ParseResult:
    """Convenience wrapper for callers holding plain text rather than a ConversionResult."""
    if not isinstance(text, str):
        raise TypeError(f"text must be a string, got {type(text).__name__}")
    if not isinstance(html, str):
        raise TypeError(f"html must be a string, got {type(html).__name__}")
    conversion = ConversionResult(text=text, html=html, messages=messages or [])
    return parse_cv(conversion, source_file_name, settings=settings, now=now)
