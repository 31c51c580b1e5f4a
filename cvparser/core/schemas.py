from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


Severity = Literal["info", "warning", "error"]
PositionType = Literal["academic", "research", "consulting", "industry", "other"]
PublicationType = Literal["journal", "conference", "book", "chapter", "other"]
PatentStatus = Literal["registered", "pending", "completed", "expired"]
PatentType = Literal["international", "korean", "other"]
AwardCategory = Literal["research", "teaching", "service", "other"]
ProjectStatus = Literal["ongoing", "completed", "planned"]


class CamelModel(BaseModel):
    """Base for everything that crosses the JSON boundary: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SectionType(str, Enum):
    PROFILE = "profile"
    SUMMARY = "summary"
    EDUCATION = "education"
    EXPERIENCE = "experience"
    RESEARCH = "research"
    PUBLICATIONS = "publications"
    PATENTS = "patents"
    AWARDS = "awards"
    SKILLS = "skills"
    CONTACT = "contact"
    STUDENTS = "students"
    GRANTS = "grants"
    WORKSHOPS = "workshops"
    SERVICES = "services"
    UNKNOWN = "unknown"


class Section(CamelModel):
    type: SectionType
    title: str
    content: str
    confidence: float = Field(..., ge=0.0, le=1.0)


class ParseWarning(CamelModel):
    field: str
    index: Optional[int] = None
    message: str
    severity: Severity = "warning"
    raw: Optional[str] = None

    def as_meta_string(self) -> str:
        return f"{self.field}: {self.message}"


# ----- converter contract -----

class ConverterMessage(CamelModel):
    type: Literal["warning", "error"]
    message: str


class ConversionResult(CamelModel):
    """What the document converter hands us: plain text, HTML and its own diagnostics."""
    text: str
    html: str = ""
    messages: List[ConverterMessage] = Field(default_factory=list)


# ----- entities -----

class Education(CamelModel):
    id: str
    degree: str
    institution: str
    location: Optional[str] = None
    year: Optional[str] = None
    period: Optional[str] = None
    thesis: Optional[str] = None
    supervisor: Optional[str] = None
    details: Optional[str] = None
    raw: str


class Position(CamelModel):
    id: str
    title: str
    institution: str
    location: Optional[str] = None
    period: str
    type: PositionType = "other"
    details: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)
    raw: str


class Award(CamelModel):
    id: str
    title: str
    organization: Optional[str] = None
    year: Optional[str] = None
    category: Optional[AwardCategory] = None
    details: Optional[str] = None
    raw: str


class Publication(CamelModel):
    id: str
    title: str
    authors: Optional[str] = None
    journal: Optional[str] = None
    year: Optional[int] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    link: Optional[str] = None
    type: Optional[PublicationType] = None
    impact_factor: Optional[str] = None
    quartile: Optional[str] = None
    raw: str


class Patent(CamelModel):
    id: str
    title: str
    inventors: Optional[str] = None
    number: Optional[str] = None
    country: Optional[str] = None
    date: Optional[str] = None
    status: Optional[PatentStatus] = None
    type: Optional[PatentType] = None
    link: Optional[str] = None
    raw: str


class ResearchInterest(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)


class ResearchProject(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    period: Optional[str] = None
    funding: Optional[str] = None
    funding_amount: Optional[str] = None
    role: Optional[str] = None
    status: Optional[ProjectStatus] = None
    raw: str


class Grant(CamelModel):
    id: str
    title: str
    funding_agency: Optional[str] = None
    amount: Optional[str] = None
    period: Optional[str] = None
    role: Optional[str] = None
    raw: str


class SocialLinks(CamelModel):
    google_scholar: Optional[str] = None
    linkedin: Optional[str] = None
    research_gate: Optional[str] = None
    orcid: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None


class Contact(CamelModel):
    email: Optional[str] = None
    personal_email: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    cell_phone: Optional[str] = None
    address: Optional[str] = None
    department: Optional[str] = None
    university: Optional[str] = None
    website: Optional[str] = None
    cv_url: Optional[str] = None
    social: SocialLinks = Field(default_factory=SocialLinks)


# ----- aggregated record -----

class Profile(CamelModel):
    name: str
    title: Optional[str] = None
    photo_url: Optional[str] = None
    summary: Optional[str] = None


class Language(CamelModel):
    name: str
    proficiency: Optional[str] = None


class About(CamelModel):
    brief: Optional[str] = None
    full: Optional[str] = None
    education: List[Education] = Field(default_factory=list)
    positions: List[Position] = Field(default_factory=list)
    awards: List[Award] = Field(default_factory=list)
    languages: List[Language] = Field(default_factory=list)


class Research(CamelModel):
    interests: List[ResearchInterest] = Field(default_factory=list)
    projects: List[ResearchProject] = Field(default_factory=list)
    grants: List[Grant] = Field(default_factory=list)


class Counts(CamelModel):
    publications: int = 0
    patents: int = 0
    projects: int = 0
    awards: int = 0
    students: int = 0


class RecordMeta(CamelModel):
    source_file_name: str
    parsed_at: str
    parser_version: str
    warnings: List[str] = Field(default_factory=list)


class CVRecord(CamelModel):
    profile: Profile
    about: About = Field(default_factory=About)
    research: Research = Field(default_factory=Research)
    publications: List[Publication] = Field(default_factory=list)
    patents: List[Patent] = Field(default_factory=list)
    contact: Contact = Field(default_factory=Contact)
    raw_html: Optional[str] = None
    counts: Counts = Field(default_factory=Counts)
    meta: RecordMeta


class ParseResult(CamelModel):
    data: CVRecord
    warnings: List[ParseWarning] = Field(default_factory=list)
