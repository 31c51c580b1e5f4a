"""Tests for experience (positions / appointments) extraction."""

from cvparser.core.diagnostics import WarningCollector
from cvparser.core.experience_parser import (
    UNKNOWN_ORGANIZATION,
    UNKNOWN_PERIOD,
    parse_experience,
    parse_position_entry,
)


def test_piped_position_with_achievements():
    warnings = WarningCollector()
    pos = parse_position_entry(
        "Associate Professor | INHA University | South Korea | 2022 - Present\n- Led the Geo-AI lab",
        0,
        warnings,
    )
    assert pos.title == "Associate Professor"
    assert pos.type == "academic"
    assert pos.institution == "INHA University"
    assert pos.location == "South Korea"
    assert pos.period == "2022 - Present"
    assert pos.achievements == ["Led the Geo-AI lab"]
    assert len(warnings) == 0


def test_position_types_follow_title():
    warnings = WarningCollector()
    fellow = parse_position_entry("Research Fellow | Korea Institute of Science | 2017 - 2018", 0, warnings)
    consultant = parse_position_entry("Consultant | HANCOM Inc. | 2016", 1, warnings)
    assert fellow.type == "research"
    assert consultant.type == "consulting"
    assert consultant.period == "2016"


def test_missing_organization_and_period():
    warnings = WarningCollector()
    pos = parse_position_entry("Visiting Researcher at a lab abroad", 2, warnings)
    assert pos.institution == UNKNOWN_ORGANIZATION
    assert pos.period == UNKNOWN_PERIOD
    messages = [w.message for w in warnings]
    assert "Position 3: organization not found - please review" in messages
    assert "Position 3: period unclear - please review" in messages
    assert all(w.index == 2 for w in warnings)


def test_details_are_non_bullet_lines():
    pos = parse_position_entry(
        "Assistant Professor | Sejong University | 2018 - 2022\nDepartment of Geoinformatics\n• Taught GIS",
        0,
        WarningCollector(),
    )
    assert pos.details == "Department of Geoinformatics"
    assert pos.achievements == ["Taught GIS"]


class TestExperienceSection:
    TEXT = (
        "Associate Professor | Sejong University | South Korea | 2022 - Present\n"
        "- Leads the Geo-AI laboratory\n"
        "- Supervises graduate students\n"
        "Assistant Professor | Sejong University | South Korea | 2018 - 2022\n"
        "- Taught spatial databases"
    )

    def test_bullets_stay_with_their_position(self):
        positions = parse_experience(self.TEXT, WarningCollector())
        assert len(positions) == 2
        assert positions[0].achievements == ["Leads the Geo-AI laboratory", "Supervises graduate students"]
        assert positions[1].achievements == ["Taught spatial databases"]

    def test_ids_unique(self):
        positions = parse_experience(self.TEXT, WarningCollector())
        assert positions[0].id != positions[1].id
