"""
Unit tests for text_normalization module.

Tests whitespace canonicalization on realistic converter output.
"""

from cvparser.core.text_normalization import normalize_whitespace


class TestNormalizeWhitespace:
    """Line endings, tabs, space runs and blank-line runs."""

    def test_collapses_space_runs(self):
        assert normalize_whitespace("  Multiple   spaces  ") == "Multiple spaces"

    def test_tab_becomes_space(self):
        assert normalize_whitespace("Tab\there") == "Tab here"

    def test_blank_line_runs_collapse_to_one(self):
        assert normalize_whitespace("Line1\n\n\n\nLine2") == "Line1\n\nLine2"

    def test_single_blank_line_kept(self):
        assert normalize_whitespace("Line1\n\nLine2") == "Line1\n\nLine2"

    def test_crlf_and_cr(self):
        assert normalize_whitespace("A\r\nB\rC") == "A\nB\nC"

    def test_empty_input(self):
        assert normalize_whitespace("") == ""
        assert normalize_whitespace(" \n\t\n ") == ""

    def test_visible_content_untouched(self):
        text = "EDUCATION\nPh.D. | INHA University | 2013 - 2017"
        assert normalize_whitespace(text) == text

    def test_idempotent(self):
        once = normalize_whitespace("a  b\r\n\r\n\r\n\tc")
        assert normalize_whitespace(once) == once
