"""
Entry splitting: one section's content -> candidate entry texts.

Each strategy looks at the whole section and either returns the chunks it
recognises or None when its shape is not present. `split_entries` tries the
strategies in order and the first one that yields usable entries wins.
Extractors pick their own order (see the *_STRATEGIES tables).
"""

import logging
import re
from typing import Callable, List, Optional, Sequence, TypeVar

from cvparser.core.diagnostics import WarningCollector, excerpt
from cvparser.core.patterns import DEGREE_RULES, YEAR_RANGE_RE, first_match

logger = logging.getLogger(__name__)


Strategy = Callable[[str], Optional[List[str]]]
T = TypeVar("T")

NUMBERED_MARKER_RE = re.compile(r"^[ \t]*\d{1,3}[.)][ \t]+", re.MULTILINE)
BULLET_MARKER_RE = re.compile(r"^[ \t]*[•●▪◦·*-][ \t]+", re.MULTILINE)
BLANK_LINE_RE = re.compile(r"\n[ \t]*\n")
YEAR_TOKEN_RE = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")
PATENT_LINE_RE = re.compile(r"(?:US|KR|Patent|Application)[\s#:]", re.IGNORECASE)
CONTINUATION_RE = re.compile(r"^(?:and|the|in|on|at|for|with|by|from|to)\s", re.IGNORECASE)

PREAMBLE_ENTRY_CHARS = 40


def _split_on_markers(text: str, marker_re: "re.Pattern[str]", name: str) -> Optional[List[str]]:
    """
    Cut text at list markers.

    Needs at least two markers, or a single one at the very start of the
    text. Text in front of the first marker is kept as the first entry when
    it is entry-shaped (dated, or at least PREAMBLE_ENTRY_CHARS long), so an
    unmarked first item survives; a short label such as "Selected papers"
    is dropped.
    """
    markers = list(marker_re.finditer(text))
    if not markers:
        return None
    if len(markers) == 1 and text[:markers[0].start()].strip():
        return None

    chunks = []
    preamble = text[:markers[0].start()].strip()
    if preamble:
        if len(preamble) >= PREAMBLE_ENTRY_CHARS or YEAR_TOKEN_RE.search(preamble):
            logger.debug(f"{name} split: keeping unmarked first entry '{preamble[:60]}'")
            chunks.append(preamble)
        else:
            logger.debug(f"{name} split: dropping label '{preamble[:60]}'")

    for i, m in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
        chunks.append(text[m.end():end].strip())
    return chunks


# ============================================================================
# Strategies
# ============================================================================

def numbered_entries(text: str) -> Optional[List[str]]:
    """`1. ...` / `2) ...` list items."""
    return _split_on_markers(text, NUMBERED_MARKER_RE, "numbered")


def bullet_entries(text: str) -> Optional[List[str]]:
    """`• ...` / `- ...` / `* ...` list items."""
    return _split_on_markers(text, BULLET_MARKER_RE, "bullet")


def blank_line_blocks(text: str) -> Optional[List[str]]:
    blocks = [b.strip() for b in BLANK_LINE_RE.split(text)]
    return [b for b in blocks if b] or None


def _is_bullet(line: str) -> bool:
    return bool(BULLET_MARKER_RE.match(line))


def _looks_like_position_head(line: str) -> bool:
    return "|" in line or bool(YEAR_RANGE_RE.search(line))


def headed_blocks(text: str) -> Optional[List[str]]:
    """
    Position blocks: a head line followed by its bullet points.

    A new block starts at a non-bullet line that follows a bullet, or at a
    second head-shaped line (pipe separated or carrying a year range), so
    achievements stay attached to the position above them.
    """
    blocks: List[List[str]] = []
    current: List[str] = []
    has_head = False

    for line in text.split("\n"):
        if not line.strip():
            continue
        bullet = _is_bullet(line)
        head_shaped = not bullet and _looks_like_position_head(line)
        starts_new = current and not bullet and (_is_bullet(current[-1]) or (head_shaped and has_head))
        if starts_new:
            blocks.append(current)
            current = []
            has_head = False
        current.append(line)
        has_head = has_head or head_shaped

    if current:
        blocks.append(current)
    if len(blocks) < 2:
        return None
    return ["\n".join(b).strip() for b in blocks]


def degree_blocks(text: str) -> Optional[List[str]]:
    """Education blocks: each line naming a degree opens a new entry."""
    blocks: List[List[str]] = []
    current: List[str] = []

    for line in text.split("\n"):
        if not line.strip():
            continue
        if current and not _is_bullet(line) and first_match(DEGREE_RULES, line) and any(
            first_match(DEGREE_RULES, prev) for prev in current
        ):
            blocks.append(current)
            current = []
        current.append(line)

    if current:
        blocks.append(current)
    if len(blocks) < 2:
        return None
    return ["\n".join(b).strip() for b in blocks]


def dated_lines(text: str) -> Optional[List[str]]:
    """
    One entry per year-carrying line.

    When the first line carries a year, dated lines open entries and undated
    lines continue the previous one. When it does not, the layout is title
    first: undated lines collect until a dated line closes the entry.

    Examples:
        "Best Paper Award 2021\\nfrom the society\\nTeaching Award 2022" ->
            ["Best Paper Award 2021\\nfrom the society", "Teaching Award 2022"]
        "Best Paper Award\\nKSIS, 2021\\nCitation Award\\nMinistry, 2019" ->
            ["Best Paper Award\\nKSIS, 2021", "Citation Award\\nMinistry, 2019"]
    """
    lines = [l.strip() for l in text.split("\n") if l.strip()]
    if not lines:
        return None

    entries: List[str] = []
    current: List[str] = []
    title_first = not YEAR_TOKEN_RE.search(lines[0])

    for line in lines:
        dated = bool(YEAR_TOKEN_RE.search(line))
        if title_first:
            current.append(line)
            if dated:
                entries.append("\n".join(current))
                current = []
        elif dated and current:
            entries.append("\n".join(current))
            current = [line]
        else:
            current.append(line)

    if current:
        if title_first and entries:
            entries[-1] = "\n".join([entries[-1]] + current)
        else:
            entries.append("\n".join(current))
    return entries if len(entries) >= 2 else None


def patent_lines(text: str) -> Optional[List[str]]:
    """
    Last-resort patent split on line shape.

    A line opens a new entry if it is a list item, names a patent/application
    number, or is a long capitalized line following another long line.
    """
    lines = [l.strip() for l in text.split("\n") if len(l.strip()) > 15]
    entries: List[str] = []
    current = ""

    for i, line in enumerate(lines):
        prev = lines[i - 1] if i > 0 else ""
        new_entry = (
            bool(NUMBERED_MARKER_RE.match(line))
            or _is_bullet(line)
            or bool(PATENT_LINE_RE.search(line))
            or (i > 0 and len(line) > 40 and line[0].isupper() and len(prev) > 40 and not CONTINUATION_RE.match(line))
        )
        if new_entry and len(current) > 30:
            entries.append(current.strip())
            current = line
        else:
            current = f"{current}\n{line}" if current else line

    if current.strip():
        entries.append(current.strip())
    return entries or None


DEFAULT_STRATEGIES: Sequence[Strategy] = (numbered_entries, bullet_entries, blank_line_blocks)
EXPERIENCE_STRATEGIES: Sequence[Strategy] = (numbered_entries, headed_blocks, blank_line_blocks)
EDUCATION_STRATEGIES: Sequence[Strategy] = (numbered_entries, degree_blocks, blank_line_blocks)
AWARD_STRATEGIES: Sequence[Strategy] = (numbered_entries, bullet_entries, dated_lines, blank_line_blocks)


# ============================================================================
# Public API
# ============================================================================

def split_entries(
    text: str,
    strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    min_length: int = 20,
) -> List[str]:
    """
    Split section content into entries.

    Args:
        text: Section content
        strategies: Strategies to try, in priority order
        min_length: Entries shorter than this are noise

    Returns:
        Entries of the first strategy that produced at least one entry of
        `min_length` characters or more; empty list if none did
    """
    for strategy in strategies:
        chunks = strategy(text)
        if not chunks:
            continue
        entries = [c for c in chunks if len(c) >= min_length]
        if entries:
            if len(entries) < len(chunks):
                logger.debug(f"{strategy.__name__}: {len(chunks) - len(entries)} short chunk(s) discarded")
            return entries
    return []


def parse_each(
    entries: Sequence[str],
    parse_entry: Callable[[str, int], T],
    warnings: WarningCollector,
    section_title: str,
) -> List[T]:
    """
    Run `parse_entry(entry, index)` over every entry.

    A failure in one entry becomes an error warning tagged with the section
    title and the next entry is still parsed.
    """
    results: List[T] = []
    for index, entry in enumerate(entries):
        try:
            results.append(parse_entry(entry, index))
        except Exception as exc:
            logger.exception(f"Entry {index + 1} of '{section_title}' failed")
            warnings.error(
                section_title,
                f"Error parsing entry {index + 1} of \"{section_title}\": {exc}",
                index=index,
                raw=excerpt(entry),
            )
    return results
