"""
Schema validation for CV records coming from outside the parser.

These models are separate from schemas.py. They check a JSON document
someone else produced or edited by hand: types are strict, unknown keys are
kept, and every problem is reported with its path instead of being coerced.
"""

import re
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from cvparser.core.schemas import CamelModel


EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
URL_PATTERN = r"^[A-Za-z][A-Za-z0-9+.\-]*://\S+$"
MIN_YEAR = 1900
MAX_YEAR = 2100

NonEmptyStr = Annotated[str, Field(min_length=1)]
Email = Annotated[str, Field(pattern=EMAIL_PATTERN)]
Url = Annotated[str, Field(pattern=URL_PATTERN)]
Year = Annotated[int, Field(ge=MIN_YEAR, le=MAX_YEAR)]
Count = Annotated[int, Field(ge=0)]


class StrictModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        strict=True,
        extra="allow",
    )


# ===== ENTITIES =====

class ProfileSchema(StrictModel):
    name: NonEmptyStr
    title: Optional[str] = None
    photo_url: Optional[str] = None
    summary: Optional[str] = None


class EducationSchema(StrictModel):
    id: NonEmptyStr
    degree: NonEmptyStr
    institution: NonEmptyStr
    location: Optional[str] = None
    year: Optional[str] = None
    period: Optional[str] = None
    thesis: Optional[str] = None
    supervisor: Optional[str] = None
    details: Optional[str] = None
    raw: Optional[str] = None


class PositionSchema(StrictModel):
    id: NonEmptyStr
    title: NonEmptyStr
    institution: NonEmptyStr
    location: Optional[str] = None
    period: NonEmptyStr
    type: Literal["academic", "research", "consulting", "industry", "other"]
    details: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)
    raw: Optional[str] = None


class AwardSchema(StrictModel):
    id: NonEmptyStr
    title: NonEmptyStr
    organization: Optional[str] = None
    year: Optional[str] = None
    category: Optional[Literal["research", "teaching", "service", "other"]] = None
    details: Optional[str] = None
    raw: Optional[str] = None


class LanguageSchema(StrictModel):
    name: NonEmptyStr
    proficiency: Optional[str] = None


class AboutSchema(StrictModel):
    brief: Optional[str] = None
    full: Optional[str] = None
    education: List[EducationSchema] = Field(default_factory=list)
    positions: List[PositionSchema] = Field(default_factory=list)
    awards: List[AwardSchema] = Field(default_factory=list)
    languages: List[LanguageSchema] = Field(default_factory=list)


class ResearchInterestSchema(StrictModel):
    id: NonEmptyStr
    name: NonEmptyStr
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)


class ResearchProjectSchema(StrictModel):
    id: NonEmptyStr
    title: NonEmptyStr
    description: Optional[str] = None
    period: Optional[str] = None
    funding: Optional[str] = None
    funding_amount: Optional[str] = None
    role: Optional[str] = None
    status: Optional[Literal["ongoing", "completed", "planned"]] = None
    raw: Optional[str] = None


class GrantSchema(StrictModel):
    id: NonEmptyStr
    title: NonEmptyStr
    funding_agency: Optional[str] = None
    amount: Optional[str] = None
    period: Optional[str] = None
    role: Optional[str] = None
    raw: Optional[str] = None


class ResearchSchema(StrictModel):
    interests: List[ResearchInterestSchema] = Field(default_factory=list)
    projects: List[ResearchProjectSchema] = Field(default_factory=list)
    grants: List[GrantSchema] = Field(default_factory=list)


class PublicationSchema(StrictModel):
    id: NonEmptyStr
    title: NonEmptyStr
    authors: Optional[str] = None
    journal: Optional[str] = None
    year: Optional[Year] = None
    volume: Optional[str] = None
    issue: Optional[str] = None
    pages: Optional[str] = None
    doi: Optional[str] = None
    link: Optional[str] = None
    type: Optional[Literal["journal", "conference", "book", "chapter", "other"]] = None
    impact_factor: Optional[str] = None
    quartile: Optional[str] = None
    raw: Optional[str] = None


class PatentSchema(StrictModel):
    id: NonEmptyStr
    title: NonEmptyStr
    inventors: Optional[str] = None
    number: Optional[str] = None
    country: Optional[str] = None
    date: Optional[str] = None
    status: Optional[Literal["registered", "pending", "completed", "expired"]] = None
    type: Optional[Literal["international", "korean", "other"]] = None
    link: Optional[str] = None
    raw: Optional[str] = None


class SocialLinksSchema(StrictModel):
    google_scholar: Optional[str] = None
    linkedin: Optional[str] = None
    research_gate: Optional[str] = None
    orcid: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None


class ContactSchema(StrictModel):
    email: Optional[Email] = None
    personal_email: Optional[Email] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    cell_phone: Optional[str] = None
    address: Optional[str] = None
    department: Optional[str] = None
    university: Optional[str] = None
    website: Optional[Url] = None
    cv_url: Optional[str] = None
    social: SocialLinksSchema = Field(default_factory=SocialLinksSchema)


class CountsSchema(StrictModel):
    publications: Count
    patents: Count
    projects: Count
    awards: Count
    students: Optional[Count] = None


class MetaSchema(StrictModel):
    source_file_name: NonEmptyStr
    parsed_at: NonEmptyStr
    parser_version: NonEmptyStr
    warnings: List[str] = Field(default_factory=list)

    @field_validator("parsed_at")
    @classmethod
    def _iso_timestamp(cls, value: str) -> str:
        # fromisoformat only learned the trailing "Z" in 3.11
        try:
            datetime.fromisoformat(re.sub(r"Z$", "+00:00", value))
        except ValueError:
            raise ValueError("parsedAt must be an ISO 8601 timestamp")
        return value


# ===== RECORDS =====

class RecordSchema(StrictModel):
    profile: ProfileSchema
    about: AboutSchema
    research: ResearchSchema
    publications: List[PublicationSchema] = Field(default_factory=list)
    patents: List[PatentSchema] = Field(default_factory=list)
    contact: ContactSchema
    raw_html: Optional[str] = None
    counts: CountsSchema
    meta: MetaSchema


class PartialRecordSchema(RecordSchema):
    """Preview-stage record: every top-level part may still be missing."""
    profile: Optional[ProfileSchema] = None
    about: Optional[AboutSchema] = None
    research: Optional[ResearchSchema] = None
    contact: Optional[ContactSchema] = None
    counts: Optional[CountsSchema] = None
    meta: Optional[MetaSchema] = None


# ===== RESULTS =====

class ValidationIssue(CamelModel):
    path: List[str]
    message: str


class ValidationResult(CamelModel):
    success: bool
    data: Optional[Dict[str, Any]] = None
    errors: Optional[List[ValidationIssue]] = None


def _run(schema: type, candidate: Any) -> ValidationResult:
    try:
        model = schema.model_validate(candidate)
    except ValidationError as exc:
        issues = [
            ValidationIssue(path=[str(part) for part in err["loc"]], message=err["msg"])
            for err in exc.errors()
        ]
        return ValidationResult(success=False, errors=issues)
    return ValidationResult(success=True, data=model.model_dump(by_alias=True, exclude_unset=True))


def validate_record(candidate: Any) -> ValidationResult:
    """
    Validate a complete CV record given as a JSON-like object (camelCase keys).

    Args:
        candidate: Parsed JSON; never modified

    Returns:
        ValidationResult with the validated data on success, otherwise one
        issue per problem with its path, e.g. ["profile", "name"]
    """
    return _run(RecordSchema, candidate)


def validate_partial_record(candidate: Any) -> ValidationResult:
    return _run(PartialRecordSchema, candidate)
