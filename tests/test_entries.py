"""
Tests for entry splitting strategies and per-entry error isolation.
"""

from cvparser.core.diagnostics import WarningCollector
from cvparser.core.entries import (
    AWARD_STRATEGIES,
    EDUCATION_STRATEGIES,
    EXPERIENCE_STRATEGIES,
    blank_line_blocks,
    bullet_entries,
    dated_lines,
    degree_blocks,
    headed_blocks,
    numbered_entries,
    parse_each,
    patent_lines,
    split_entries,
)


# ===== STRATEGIES =====

class TestNumberedEntries:
    def test_numbered_items(self):
        text = "1. First entry text\n2) Second entry text\n3. Third entry text"
        assert numbered_entries(text) == ["First entry text", "Second entry text", "Third entry text"]

    def test_preamble_dropped(self):
        text = "Selected papers (SCIE)\n1. First entry\n2. Second entry"
        assert numbered_entries(text) == ["First entry", "Second entry"]

    def test_unmarked_first_entry_kept(self):
        text = "Doe, J. (2024). Flood mapping with deep learning\n1. Second entry\n2. Third entry"
        assert numbered_entries(text) == [
            "Doe, J. (2024). Flood mapping with deep learning",
            "Second entry",
            "Third entry",
        ]

    def test_single_marker_mid_text_is_not_a_list(self):
        assert numbered_entries("Some intro line\n1. Only one item") is None

    def test_single_marker_at_start_is_a_list(self):
        assert numbered_entries("1. Only one item\ncontinued here") == ["Only one item\ncontinued here"]

    def test_no_markers(self):
        assert numbered_entries("plain text") is None


def test_bullet_entries():
    text = "• Best Paper Award 2021\n- Teaching Award 2022"
    assert bullet_entries(text) == ["Best Paper Award 2021", "Teaching Award 2022"]


def test_bullet_entries_keep_unbulleted_first_entry():
    text = (
        "Doe, J., Kim, H. (2024). Flood mapping with deep learning models.\n"
        "- Kim, H., Doe, J. (2022). Indoor positioning for augmented reality.\n"
        "- Doe, J., Park, S. (2020). Metaverse platforms for urban planning."
    )
    entries = bullet_entries(text)
    assert len(entries) == 3
    assert entries[0].startswith("Doe, J., Kim, H. (2024)")


def test_blank_line_blocks():
    assert blank_line_blocks("Block one\nline two\n\nBlock two") == ["Block one\nline two", "Block two"]
    assert blank_line_blocks("   ") is None


class TestHeadedBlocks:
    def test_bullets_stay_with_their_position(self):
        text = (
            "Associate Professor | Sejong University | 2022 - Present\n"
            "- Leads the Geo-AI lab\n"
            "- Teaches GIS\n"
            "Research Fellow | INHA University | 2017 - 2018\n"
            "- Built indoor maps"
        )
        blocks = headed_blocks(text)
        assert len(blocks) == 2
        assert blocks[0].endswith("- Teaches GIS")
        assert blocks[1].startswith("Research Fellow")

    def test_consecutive_head_lines(self):
        text = "Professor | A University | 2020 - 2024\nLecturer | B University | 2015 - 2020"
        assert len(headed_blocks(text)) == 2

    def test_single_block_is_not_a_split(self):
        assert headed_blocks("Professor | A University | 2020 - 2024\n- Did things") is None


def test_degree_blocks():
    text = (
        "Ph.D. in Geomatics Engineering | INHA University | 2013 - 2017\n"
        "Thesis: Indoor spatial computing\n"
        "M.Sc. in Civil Engineering | KNTU | 2008 - 2011"
    )
    blocks = degree_blocks(text)
    assert len(blocks) == 2
    assert "Thesis" in blocks[0]


def test_dated_lines():
    text = "Best Paper Award 2021\nfrom the society\nTeaching Award 2022"
    assert dated_lines(text) == ["Best Paper Award 2021\nfrom the society", "Teaching Award 2022"]
    assert dated_lines("Only one award 2020") is None


def test_dated_lines_title_first():
    text = (
        "Best Paper Award\n"
        "Korea Spatial Information Society, 2021\n"
        "Presidential Citation Award\n"
        "Ministry of Science and ICT, 2019"
    )
    assert dated_lines(text) == [
        "Best Paper Award\nKorea Spatial Information Society, 2021",
        "Presidential Citation Award\nMinistry of Science and ICT, 2019",
    ]


def test_patent_lines():
    text = (
        "Method for generating indoor spatial maps using sensors, US Patent 11,816,804\n"
        "System for visualizing geospatial data in mixed reality, Patent No. 10-2356500"
    )
    assert len(patent_lines(text)) == 2


# ===== SPLIT ENTRIES =====

class TestSplitEntries:
    def test_first_strategy_with_usable_entries_wins(self):
        text = "1. A long enough first entry\n2. A long enough second entry"
        assert split_entries(text) == ["A long enough first entry", "A long enough second entry"]

    def test_short_entries_dropped(self):
        text = "1. A long enough first entry\n2. short"
        assert split_entries(text) == ["A long enough first entry"]

    def test_falls_through_to_blank_lines(self):
        text = "First block with enough text\n\nSecond block with enough text"
        assert len(split_entries(text)) == 2

    def test_nothing_usable(self):
        assert split_entries("tiny") == []

    def test_strategy_tables_start_with_numbered(self):
        for strategies in (EDUCATION_STRATEGIES, EXPERIENCE_STRATEGIES, AWARD_STRATEGIES):
            assert strategies[0] is numbered_entries


# ===== ERROR ISOLATION =====

def test_parse_each_turns_failures_into_error_warnings():
    warnings = WarningCollector()

    def parse(entry, index):
        if "bad" in entry:
            raise ValueError("cannot read entry")
        return entry.upper()

    results = parse_each(["good one", "bad one", "good two"], parse, warnings, "Publications")

    assert results == ["GOOD ONE", "GOOD TWO"]
    assert len(warnings) == 1
    warning = warnings.as_list()[0]
    assert warning.severity == "error"
    assert warning.field == "Publications"
    assert warning.index == 1
    assert warning.message == 'Error parsing entry 2 of "Publications": cannot read entry'
    assert warning.raw == "bad one"
