"""
Text normalization for converter output.

The converter hands over text with whatever line endings, tabs and spacing
the source document happened to use. Everything downstream (section
detection, entry splitting) is line-oriented, so this is the one place that
canonicalizes whitespace. It never fails and never removes visible content.
"""

import re


# ============================================================================
# Whitespace patterns
# ============================================================================

CRLF_RE = re.compile(r"\r\n?")
TAB_RE = re.compile(r"\t")
SPACE_RUN_RE = re.compile(r" {2,}")
BLANK_RUN_RE = re.compile(r"\n{3,}")


# ============================================================================
# Public API
# ============================================================================

def normalize_whitespace(text: str) -> str:
    """
    Canonicalize whitespace in converter text.

    - CRLF and bare CR become LF
    - tabs become spaces, space runs collapse to one space
    - three or more newlines collapse to a single blank line
    - surrounding whitespace is trimmed

    Examples:
        "  Multiple   spaces  " -> "Multiple spaces"
        "Tab\\there" -> "Tab here"
        "Line1\\n\\n\\n\\nLine2" -> "Line1\\n\\nLine2"
    """
    text = CRLF_RE.sub("\n", text)
    text = TAB_RE.sub(" ", text)
    text = SPACE_RUN_RE.sub(" ", text)
    text = BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()
