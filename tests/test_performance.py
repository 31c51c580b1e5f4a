"""
Worst-case input sizes must parse within a fixed time budget.
"""

import time

import pytest

from cvparser.core.aggregator import parse_text


BUDGET_SECONDS = 5.0
SIZE = 200_000


def _long_lines(header):
    line = "A" * 5000 + "\n"
    return header + "\n" + line * (SIZE // len(line))


PATHOLOGICAL_INPUTS = {
    "publication lines": _long_lines("PUBLICATIONS"),
    "patent lines": _long_lines("PATENTS"),
    "education lines": _long_lines("EDUCATION"),
    "contact noise": "CONTACT\n" + ("a@" * 2000 + "\n") * 50,
    "digits": "AWARDS\n" + ("1999 - " * 700 + "\n") * 40,
    "quotes": "JOURNAL PAPERS\n" + ('"' + "x, " * 1600 + "\n") * 40,
    "no headers": ("word " * 1000 + "\n") * 40,
}


@pytest.mark.parametrize("name", sorted(PATHOLOGICAL_INPUTS))
def test_pathological_input_is_bounded(name):
    text = PATHOLOGICAL_INPUTS[name]
    assert len(text) >= SIZE * 0.9

    start = time.perf_counter()
    result = parse_text(text, "big.txt")
    elapsed = time.perf_counter() - start

    assert elapsed < BUDGET_SECONDS, f"{name} took {elapsed:.2f}s"
    assert result.data.meta.source_file_name == "big.txt"
