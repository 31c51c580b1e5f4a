"""
Contact parsing: emails, phones, links, address and affiliation.

Every field is optional. The parser works on a contact section or, when the
CV has none, on the leading part of the document (the aggregator decides).
"""

import logging
import re
from typing import Iterable, List, Optional, Tuple

from cvparser.core.diagnostics import WarningCollector
from cvparser.core.patterns import (
    INSTITUTION_RULES,
    KNOWN_INSTITUTIONS,
    Rule,
    classify,
    extract_emails,
    extract_first,
    extract_phone_numbers,
    extract_urls,
    scan_window,
    tidy,
)
from cvparser.core.schemas import Contact, SocialLinks

logger = logging.getLogger(__name__)


INSTITUTIONAL_EMAIL_MARKERS = (".edu", ".ac.") + tuple(name.lower() for name in KNOWN_INSTITUTIONS)
PERSONAL_EMAIL_PROVIDERS = ("gmail", "yahoo", "hotmail", "outlook", "naver")

# ===== PHONE LABELS =====

TEL_LABEL_RE = re.compile(r"\bTel(?:ephone)?[:\s|]+([^\n]+)", re.IGNORECASE)
FAX_LABEL_RE = re.compile(r"\bFax[:\s|]+([^\n]+)", re.IGNORECASE)
CELL_LABEL_RE = re.compile(r"\b(?:Cell(?:\s*Phone)?|Mobile)[:\s|]+([^\n]+)", re.IGNORECASE)

# ===== LINKS =====

# URL -> SocialLinks attribute; first match wins.
SOCIAL_URL_RULES: List[Rule] = [
    Rule(re.compile(r"linkedin", re.IGNORECASE), "linkedin"),
    Rule(re.compile(r"scholar\.google", re.IGNORECASE), "google_scholar"),
    Rule(re.compile(r"researchgate", re.IGNORECASE), "research_gate"),
    Rule(re.compile(r"orcid", re.IGNORECASE), "orcid"),
    Rule(re.compile(r"twitter\.com|//(?:www\.)?x\.com\b", re.IGNORECASE), "twitter"),
    Rule(re.compile(r"github", re.IGNORECASE), "github"),
]

GENERIC_SITE_RE = re.compile(r"\.(?:com|org|net|io|me|info)\b|\.ac\.", re.IGNORECASE)
CV_URL_RE = re.compile(r"\.pdf$", re.IGNORECASE)
WEBSITE_LABEL_RE = re.compile(r"\bWebsite[:\s|]+(\S+)", re.IGNORECASE)
LINKEDIN_LABEL_RE = re.compile(r"\bLinkedIn[:\s|]+(\S+)", re.IGNORECASE)
LINKEDIN_PROFILE_PREFIX = "https://linkedin.com/in/"

# ===== ADDRESS / AFFILIATION =====

ADDRESS_RULES: List[Rule] = [
    Rule(re.compile(r"\b(?:Address|Location)[:\s|]+([^\n]+)", re.IGNORECASE), "labelled", 1),
    Rule(re.compile(r"^[ \t]*((?!(?:19|20)\d{2}\b)\d{1,5}[-\s]+[A-Za-z][^\n]*,[^\n]*)$", re.MULTILINE), "street", 1),
]

DEPARTMENT_RULES: List[Rule] = [
    Rule(re.compile(r"\bDept\.?\s*(?:of\s+)?([^\n,|]+)", re.IGNORECASE), "dept", 1),
    Rule(re.compile(r"\bDepartment\s+of\s+([^\n,|]+)", re.IGNORECASE), "department", 1),
]


def _pick_emails(emails: List[str]) -> Tuple[str, Optional[str]]:
    official = next((e for e in emails if any(m in e.lower() for m in INSTITUTIONAL_EMAIL_MARKERS)), None)
    personal = next((e for e in emails if any(p in e.lower() for p in PERSONAL_EMAIL_PROVIDERS)), None)
    email = official or emails[0]
    return email, personal if personal != email else None


def _labelled_phone(pattern: "re.Pattern[str]", text: str) -> Optional[str]:
    m = pattern.search(text)
    if not m:
        return None
    phones = extract_phone_numbers(m.group(1))
    return phones[0] if phones else None


def _with_scheme(value: str) -> str:
    return value if value.lower().startswith("http") else f"https://{value}"


def _classify_urls(urls: Iterable[str], contact: Contact, name_tokens: Iterable[str]) -> None:
    tokens = [t.lower() for t in name_tokens if t]
    for url in urls:
        target = classify(SOCIAL_URL_RULES, url)
        if target:
            if getattr(contact.social, target) is None:
                setattr(contact.social, target, url)
            continue
        lowered = url.lower()
        if contact.cv_url is None and CV_URL_RE.search(lowered):
            contact.cv_url = url
        elif contact.website is None and (any(t in lowered for t in tokens) or GENERIC_SITE_RE.search(lowered)):
            contact.website = url


def parse_contact(
    text: str,
    warnings: WarningCollector,
    name_tokens: Iterable[str] = (),
) -> Contact:
    """
    Extract contact details from a block of text.

    Args:
        text: Contact section content, or the head of the document
        warnings: Collector for this parse call
        name_tokens: Lower-case pieces of the subject's name; a URL containing
            one of them is taken as the personal website

    Returns:
        Contact with whatever could be found; missing fields stay None

    Examples:
        "Official Email | a.sadeghi@sejong.ac.kr\\nPersonal Email | a.sadeqi313@gmail.com"
            -> email="a.sadeghi@sejong.ac.kr", personal_email="a.sadeqi313@gmail.com"
    """
    contact = Contact(social=SocialLinks())

    emails = extract_emails(text)
    if emails:
        contact.email, contact.personal_email = _pick_emails(emails)
    else:
        warnings.info("contact", "No email address found")

    phones = extract_phone_numbers(text)
    if phones:
        contact.phone = _labelled_phone(TEL_LABEL_RE, text)
        contact.fax = _labelled_phone(FAX_LABEL_RE, text)
        contact.cell_phone = _labelled_phone(CELL_LABEL_RE, text)
        if contact.phone is None:
            labelled = {contact.fax, contact.cell_phone}
            contact.phone = next((p for p in phones if p not in labelled), None)

    _classify_urls(extract_urls(text), contact, name_tokens)

    if contact.website is None:
        m = WEBSITE_LABEL_RE.search(text)
        if m:
            contact.website = _with_scheme(m.group(1))

    if contact.social.linkedin is None:
        m = LINKEDIN_LABEL_RE.search(text)
        if m:
            value = m.group(1)
            if value.lower().startswith("http"):
                contact.social.linkedin = value
            elif "linkedin.com" in value.lower():
                contact.social.linkedin = _with_scheme(value)
            else:
                contact.social.linkedin = f"{LINKEDIN_PROFILE_PREFIX}{value}"

    window = scan_window(text)
    contact.address = tidy(extract_first(ADDRESS_RULES, window))
    contact.department = tidy(extract_first(DEPARTMENT_RULES, window))
    contact.university = tidy(extract_first(INSTITUTION_RULES, window))

    logger.debug(f"Contact: email={contact.email}, phone={contact.phone}, website={contact.website}")
    return contact


def merge_contact(primary: Contact, fallback: Contact) -> Contact:
    """Fill the gaps of `primary` from `fallback`; values already found are kept."""
    merged = primary.model_copy(deep=True)
    for name in Contact.model_fields:
        if name == "social":
            continue
        if getattr(merged, name) is None:
            setattr(merged, name, getattr(fallback, name))
    for name in SocialLinks.model_fields:
        if getattr(merged.social, name) is None:
            setattr(merged.social, name, getattr(fallback.social, name))
    return merged
