from io import BytesIO

import pytest
from docx import Document
from docx.enum.style import WD_STYLE_TYPE
from fastapi.testclient import TestClient

from cvparser.core.docx_extractor import DocumentConversionError, convert_docx
from cvparser.main import app

client = TestClient(app)

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _docx_bytes(doc):
    buf = BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _sample_doc():
    doc = Document()
    doc.add_paragraph("Dr. Jane Doe")
    doc.add_paragraph("jane.doe@sejong.ac.kr")
    doc.add_heading("JOURNAL PAPERS", level=1)
    doc.add_paragraph(
        'Doe, J., Kim, H. (2024). "Flood susceptibility mapping with deep learning". Journal of Hydrology.',
        style="List Number",
    )
    doc.add_paragraph(
        'Kim, H., Doe, J. (2023). "Indoor positioning for augmented reality navigation". Sensors.',
        style="List Number",
    )
    return doc


# ===== CONVERTER =====

def test_convert_headings_and_numbered_list():
    result = convert_docx(_docx_bytes(_sample_doc()))
    blocks = result.text.split("\n\n")
    assert blocks[0] == "Dr. Jane Doe"
    assert blocks[2] == "JOURNAL PAPERS"
    assert blocks[3].startswith("1. Doe, J.")
    assert blocks[4].startswith("2. Kim, H.")
    assert "<h1>JOURNAL PAPERS</h1>" in result.html
    assert result.html.count("<li>") == 2
    assert "<ol>" in result.html
    assert result.messages == []


def test_convert_bullets_and_table():
    doc = Document()
    doc.add_paragraph("Geo-AI", style="List Bullet")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Ph.D. in Geomatics"
    table.rows[0].cells[1].text = "INHA University"
    result = convert_docx(_docx_bytes(doc))
    assert result.text.split("\n\n") == ["• Geo-AI", "Ph.D. in Geomatics | INHA University"]
    assert "<td>INHA University</td>" in result.html


def test_html_is_escaped():
    doc = Document()
    doc.add_paragraph("R&D <lab>")
    assert "<p>R&amp;D &lt;lab&gt;</p>" in convert_docx(_docx_bytes(doc)).html


def test_unknown_style_reported_once():
    doc = Document()
    doc.styles.add_style("CV Body", WD_STYLE_TYPE.PARAGRAPH)
    doc.add_paragraph("first", style="CV Body")
    doc.add_paragraph("second", style="CV Body")
    messages = convert_docx(_docx_bytes(doc)).messages
    assert len(messages) == 1
    assert messages[0].type == "warning"
    assert messages[0].message.startswith("Unrecognised paragraph style: 'CV Body'")


def test_not_a_docx():
    with pytest.raises(DocumentConversionError):
        convert_docx(b"plain bytes, not a zip package")


# ===== API =====

def test_parse_docx_upload():
    files = {"file": ("jane_doe.docx", _docx_bytes(_sample_doc()), DOCX_TYPE)}
    r = client.post("/parse", files=files)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["profile"]["name"] == "Dr. Jane Doe"
    assert data["contact"]["email"] == "jane.doe@sejong.ac.kr"
    assert data["counts"]["publications"] == 2
    assert data["meta"]["sourceFileName"] == "jane_doe.docx"
    assert data["rawHtml"].startswith("<p>Dr. Jane Doe</p>")


def test_parse_rejects_broken_docx():
    files = {"file": ("broken.docx", b"not a zip", DOCX_TYPE)}
    r = client.post("/parse", files=files)
    assert r.status_code == 422


def test_parse_docx_without_text():
    files = {"file": ("empty.docx", _docx_bytes(Document()), DOCX_TYPE)}
    r = client.post("/parse", files=files)
    assert r.status_code == 422
    assert r.json()["detail"] == "Document has no extractable text."


def test_parse_rejects_unsupported_type():
    files = {"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")}
    r = client.post("/parse", files=files)
    assert r.status_code == 415


def test_parse_rejects_empty_upload():
    files = {"file": ("cv.docx", b"", DOCX_TYPE)}
    r = client.post("/parse", files=files)
    assert r.status_code == 400


def test_health():
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["service"] == "cvparser"
