import re
from typing import List, Optional

from cvparser.core.patterns import Rule, extract_first
from cvparser.core.sections import HEADER_KEYWORDS


NAME_SCAN_CHARS = 500
TITLE_SCAN_CHARS = 1000
MIN_NAME_TOKEN_CHARS = 3

DR_NAME_RE = re.compile(r"\bDr\.?\s*(?:Eng\.?\s*)?([A-Z][a-z]+(?:[ -][A-Z][a-z]+){1,3})")
HEADER_NAME_RE = re.compile(r"^[ \t]*([A-Z][a-z]+(?:[ -][A-Z][a-z]+){1,3})[ \t]*$", re.MULTILINE)

# Title-cased lines at the top of a CV that are never the subject's name.
NOT_A_NAME = {
    "curriculum vitae",
    "resume",
    "personal information",
    "personal details",
    "table of contents",
}

# Ordered: "Associate Professor" must win over the "Professor" inside it.
PROFILE_TITLE_RULES: List[Rule] = [
    Rule(re.compile(r"Associate Professor[^\n]*", re.IGNORECASE)),
    Rule(re.compile(r"Assistant Professor[^\n]*", re.IGNORECASE)),
    Rule(re.compile(r"Professor[^\n]*", re.IGNORECASE)),
    Rule(re.compile(r"Research(?:er)?[^\n]*", re.IGNORECASE)),
    Rule(re.compile(r"Fellow[^\n]*", re.IGNORECASE)),
]


def extract_profile_name(text: str) -> Optional[str]:
    """
    Subject's name from the top of the CV.

    A "Dr." prefixed name in the first 1000 characters wins; otherwise the first line in the
    first 500 characters that is nothing but 2-4 capitalized words.
    """
    m = DR_NAME_RE.search(text[:TITLE_SCAN_CHARS])
    if m:
        return f"Dr. {m.group(1)}"
    for m in HEADER_NAME_RE.finditer(text[:NAME_SCAN_CHARS]):
        candidate = m.group(1)
        lowered = candidate.lower()
        if lowered in NOT_A_NAME or any(k in lowered for k in HEADER_KEYWORDS):
            continue
        return candidate
    return None


def extract_profile_title(text: str) -> Optional[str]:
    return extract_first(PROFILE_TITLE_RULES, text[:TITLE_SCAN_CHARS])


def name_tokens(name: Optional[str]) -> List[str]:
    """Lower-case name parts usable for matching a personal website, e.g. 'Dr. Jane Doe-Kim' -> ['jane', 'doe', 'kim']."""
    if not name:
        return []
    parts = re.split(r"[\s.\-]+", name.lower())
    return [p for p in parts if len(p) >= MIN_NAME_TOKEN_CHARS]
