"""Tests for contact extraction and merging."""

from cvparser.core.contact_parser import merge_contact, parse_contact
from cvparser.core.diagnostics import WarningCollector
from cvparser.core.schemas import Contact, SocialLinks


def _contact(text, name_tokens=()):
    return parse_contact(text, WarningCollector(), name_tokens)


def test_official_and_personal_email():
    contact = _contact("Official Email | a.sadeghi@sejong.ac.kr\nPersonal Email | a.sadeqi313@gmail.com")
    assert contact.email == "a.sadeghi@sejong.ac.kr"
    assert contact.personal_email == "a.sadeqi313@gmail.com"


def test_personal_only_email_is_primary():
    contact = _contact("Email: jane.doe@gmail.com")
    assert contact.email == "jane.doe@gmail.com"
    assert contact.personal_email is None


def test_no_email_is_info_warning():
    warnings = WarningCollector()
    parse_contact("Seoul, South Korea", warnings)
    assert warnings.as_list()[0].severity == "info"
    assert warnings.as_list()[0].message == "No email address found"


class TestPhones:
    def test_labelled_numbers(self):
        contact = _contact("Tel: +82-2-3408-1234\nFax: +82-2-3408-4321\nCell Phone: +82-10-1234-5678")
        assert contact.phone == "+82-2-3408-1234"
        assert contact.fax == "+82-2-3408-4321"
        assert contact.cell_phone == "+82-10-1234-5678"

    def test_unlabelled_phone_skips_fax(self):
        contact = _contact("Fax: +82-2-3408-4321\nCall +82-2-3408-1234")
        assert contact.fax == "+82-2-3408-4321"
        assert contact.phone == "+82-2-3408-1234"


class TestLinks:
    def test_social_links(self):
        contact = _contact(
            "https://scholar.google.com/citations?user=abc\n"
            "https://www.researchgate.net/profile/Jane-Doe\n"
            "https://orcid.org/0000-0002-1825-0097\n"
            "https://github.com/janedoe"
        )
        assert contact.social.google_scholar == "https://scholar.google.com/citations?user=abc"
        assert contact.social.research_gate == "https://www.researchgate.net/profile/Jane-Doe"
        assert contact.social.orcid == "https://orcid.org/0000-0002-1825-0097"
        assert contact.social.github == "https://github.com/janedoe"

    def test_website_and_cv(self):
        contact = _contact("https://janedoe.net\nhttps://janedoe.net/files/cv.pdf")
        assert contact.website == "https://janedoe.net"
        assert contact.cv_url == "https://janedoe.net/files/cv.pdf"

    def test_name_token_identifies_website(self):
        contact = _contact("https://lab.sejong.kr/~doe", name_tokens=["doe"])
        assert contact.website == "https://lab.sejong.kr/~doe"

    def test_labelled_linkedin_handle(self):
        contact = _contact("LinkedIn: janedoe")
        assert contact.social.linkedin == "https://linkedin.com/in/janedoe"

    def test_labelled_website_without_scheme(self):
        contact = _contact("Website: janedoe.net")
        assert contact.website == "https://janedoe.net"


def test_affiliation():
    contact = _contact("Department of Geoinformatics\nSejong University, Seoul\nAddress: 209 Neungdong-ro, Seoul")
    assert contact.department == "Geoinformatics"
    assert contact.university == "Sejong University"
    assert contact.address == "209 Neungdong-ro, Seoul"


def test_merge_fills_gaps_only():
    primary = Contact(email="a@sejong.ac.kr", social=SocialLinks(github="https://github.com/a"))
    fallback = Contact(
        email="other@gmail.com",
        phone="+82-2-3408-1234",
        social=SocialLinks(github="https://github.com/b", orcid="https://orcid.org/1"),
    )
    merged = merge_contact(primary, fallback)
    assert merged.email == "a@sejong.ac.kr"
    assert merged.phone == "+82-2-3408-1234"
    assert merged.social.github == "https://github.com/a"
    assert merged.social.orcid == "https://orcid.org/1"
    assert primary.phone is None
