"""
Warning collection for a single parse call.

Warnings are the only channel through which content problems are reported:
the parser never raises on bad CV content, it records what it could not
resolve and keeps going. A collector lives for exactly one parse call.
"""

import re
from typing import Iterable, Iterator, List, Optional, Pattern

from cvparser.core.schemas import ConverterMessage, ParseWarning, Severity


EXCERPT_CHARS = 100

# Converter chatter about styles carries no information about the CV itself.
HARMLESS_CONVERTER_PATTERNS: List[Pattern[str]] = [
    re.compile(r"unrecognised (paragraph|run) style", re.IGNORECASE),
    re.compile(r"style id: (whitespace|emphasis|normal)", re.IGNORECASE),
    re.compile(r"style id: '[^']*'", re.IGNORECASE),
]


def excerpt(text: str, limit: int = EXCERPT_CHARS) -> str:
    return text[:limit]


class WarningCollector:
    """Accumulates typed warnings in the order they were raised."""

    def __init__(self) -> None:
        self._items: List[ParseWarning] = []

    def add(
        self,
        field: str,
        message: str,
        severity: Severity = "warning",
        index: Optional[int] = None,
        raw: Optional[str] = None,
    ) -> ParseWarning:
        warning = ParseWarning(field=field, message=message, severity=severity, index=index, raw=raw)
        self._items.append(warning)
        return warning

    def info(self, field: str, message: str, **kwargs) -> ParseWarning:
        return self.add(field, message, "info", **kwargs)

    def warning(self, field: str, message: str, **kwargs) -> ParseWarning:
        return self.add(field, message, "warning", **kwargs)

    def error(self, field: str, message: str, **kwargs) -> ParseWarning:
        return self.add(field, message, "error", **kwargs)

    def extend(self, warnings: Iterable[ParseWarning]) -> None:
        self._items.extend(warnings)

    def fold_converter_messages(self, messages: Iterable[ConverterMessage]) -> None:
        """Keep converter messages that say something about content; drop style noise."""
        for msg in messages:
            if any(p.search(msg.message) for p in HARMLESS_CONVERTER_PATTERNS):
                continue
            self.add("docx", msg.message, msg.type)

    def as_list(self) -> List[ParseWarning]:
        return list(self._items)

    def as_meta_strings(self) -> List[str]:
        return [w.as_meta_string() for w in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ParseWarning]:
        return iter(self._items)
