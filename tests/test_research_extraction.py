"""Tests for research projects, grants, interests and the profile header."""

from cvparser.core.diagnostics import WarningCollector
from cvparser.core.profile_parser import extract_profile_name, extract_profile_title, name_tokens
from cvparser.core.research_parser import (
    extract_research_interests,
    parse_grants_section,
    parse_project_entry,
    parse_research_section,
)


# ===== PROJECTS =====

def test_piped_project():
    project = parse_project_entry(
        "Smart City Digital Twin | NRF Korea | 2021 - Present | $120,000\nBuilt a 3D city model",
        0,
    )
    assert project.title == "Smart City Digital Twin"
    assert project.period == "2021 - Present"
    assert project.status == "ongoing"
    assert project.funding_amount == "$120,000"
    assert project.description == "Built a 3D city model"


def test_project_without_period_has_no_status():
    project = parse_project_entry("Indoor Mapping Toolkit | Internal seed project", 0)
    assert project.period is None
    assert project.status is None


def test_research_section_splits_on_piped_heads():
    text = (
        "Smart City Digital Twin | NRF Korea | 2021 - Present\n"
        "Built a 3D city model\n"
        "Flood Early Warning | KMA | 2018 - 2020\n"
        "Sensor network for urban floods"
    )
    projects = parse_research_section(text, WarningCollector())
    assert [p.title for p in projects] == ["Smart City Digital Twin", "Flood Early Warning"]
    assert projects[1].status == "completed"


# ===== GRANTS =====

def test_labelled_grants():
    text = (
        "Project title: AI-based flood prediction\n"
        "Funding Agency: National Research Foundation of Korea\n"
        "Funding: $250,000\n"
        "Duration: 2020 - 2023\n"
        "Role: Principal Investigator\n"
        "Project title: Metaverse campus platform\n"
        "Funding Agency: IITP\n"
        "Duration: 2022 - 2024"
    )
    grants = parse_grants_section(text, WarningCollector())
    assert len(grants) == 2
    first = grants[0]
    assert first.title == "AI-based flood prediction"
    assert first.funding_agency == "National Research Foundation of Korea"
    assert first.amount == "$250,000"
    assert first.period == "2020 - 2023"
    assert first.role == "Principal Investigator"
    assert grants[1].funding_agency == "IITP"


def test_unlabelled_grant_uses_first_line():
    warnings = WarningCollector()
    grants = parse_grants_section("1. Geo-AI for smart farming, Ministry of Agriculture, 2019 - 2021", warnings)
    assert grants[0].title == "Geo-AI for smart farming, Ministry of Agriculture, 2019 - 2021"
    assert grants[0].period == "2019 - 2021"
    assert warnings.as_list()[0].message == "Grant 1: no project title label - using first line"


# ===== INTERESTS =====

def test_research_interests_from_keywords():
    interests = extract_research_interests("Work on deep learning and augmented reality for GIS.")
    names = [i.name for i in interests]
    assert "Machine Learning" in names
    assert "Extended Reality (XR)" in names
    assert "Natural Language Processing" not in names


def test_keywords_match_whole_words_only():
    assert extract_research_interests("Maintained a Hawaiian archive") == []


# ===== PROFILE =====

class TestProfile:
    def test_dr_name(self):
        assert extract_profile_name("Curriculum Vitae\nDr. Jane Doe\nAssociate Professor") == "Dr. Jane Doe"

    def test_plain_header_name(self):
        assert extract_profile_name("Curriculum Vitae\nJane Doe\njane@sejong.ac.kr") == "Jane Doe"

    def test_section_titles_are_not_names(self):
        assert extract_profile_name("Research Interests\nGeo AI") is None

    def test_title(self):
        assert extract_profile_title("Dr. Jane Doe\nAssociate Professor, Sejong University") == (
            "Associate Professor, Sejong University"
        )

    def test_name_tokens(self):
        assert name_tokens("Dr. Jane Doe-Kim") == ["jane", "doe", "kim"]
        assert name_tokens(None) == []
