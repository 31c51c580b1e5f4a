"""
Tests for patent extraction and categorization.
"""

from cvparser.core.diagnostics import WarningCollector
from cvparser.core.patents_parser import categorize_patents, parse_patent_entry, parse_patents


class TestPatentEntry:
    def test_us_patent(self):
        warnings = WarningCollector()
        patent = parse_patent_entry(
            'US Patent (US11,816,804B2) Registered Nov 14, 2023. "Method for generating indoor spatial maps using sensors"',
            0,
            warnings,
        )
        assert patent.number == "11,816,804B2"
        assert patent.country == "US"
        assert patent.type == "international"
        assert patent.status == "registered"
        assert patent.date == "Nov 14, 2023"
        assert patent.title == "Method for generating indoor spatial maps using sensors"
        assert len(warnings) == 0

    def test_korean_patent(self):
        patent = parse_patent_entry(
            'Patent No. 10-2356500, Registered 2022. "System for visualizing geospatial data in mixed reality"',
            0,
            WarningCollector(),
        )
        assert patent.number == "10-2356500"
        assert patent.type == "korean"
        assert patent.country == "Korea"
        assert patent.date == "2022"

    def test_unquoted_title_survives_noise_removal(self):
        patent = parse_patent_entry(
            "Smart indoor navigation system for visually impaired users. Patent No. 10-2211334, Registered 2021",
            0,
            WarningCollector(),
        )
        assert patent.title == "Smart indoor navigation system for visually impaired users"

    def test_inventors(self):
        patent = parse_patent_entry(
            'Jane Doe, Kim Soo, Park Min. "Apparatus for real-time flood sensing". Patent No. 10-2233445, Pending',
            0,
            WarningCollector(),
        )
        assert patent.inventors == "Jane Doe, Kim Soo, Park Min"
        assert patent.status == "pending"

    def test_missing_number_warns(self):
        warnings = WarningCollector()
        patent = parse_patent_entry('"A method for indoor localization with beacons", pending', 3, warnings)
        assert patent.number is None
        assert warnings.as_list()[0].message == "Patent 4: patent number not found - please review"
        assert warnings.as_list()[0].index == 3


class TestPatentSection:
    TEXT = (
        "REGISTERED\n"
        '1. US Patent (US11,816,804B2) Registered Nov 14, 2023. "Method for generating indoor spatial maps"\n'
        '2. Patent No. 10-2356500, Registered 2022. "System for visualizing geospatial data"\n'
        "PENDING\n"
        '3. Application No. 10-2023-0012345, Pending. "Apparatus for real-time flood sensing"'
    )

    def test_subheaders_removed_and_entries_parsed(self):
        patents = parse_patents(self.TEXT, WarningCollector())
        assert len(patents) == 3
        assert patents[2].number == "10-2023-0012345"
        assert all("PENDING" not in p.raw for p in patents)

    def test_categories(self):
        groups = categorize_patents(parse_patents(self.TEXT, WarningCollector()))
        assert len(groups.registered) == 2
        assert len(groups.pending) == 1
        assert groups.other == []

    def test_empty_section_is_info(self):
        warnings = WarningCollector()
        assert parse_patents("none", warnings) == []
        assert warnings.as_list()[0].severity == "info"
        assert warnings.as_list()[0].message == "No patent entries detected in text"

    def test_unnumbered_number_then_title_lines(self):
        text = (
            "Korean Patent No. 10-2356500\n"
            "System for visualizing geospatial data in mixed reality\n"
            "Korean Patent No. 10-2211334\n"
            "Smart indoor navigation system for visually impaired users"
        )
        patents = parse_patents(text, WarningCollector())
        assert [p.number for p in patents] == ["10-2356500", "10-2211334"]
        assert all(p.type == "korean" for p in patents)
        assert patents[0].title == "System for visualizing geospatial data in mixed reality"
        assert patents[1].title == "Smart indoor navigation system for visually impaired users"
