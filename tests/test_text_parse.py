from fastapi.testclient import TestClient

from cvparser.main import app

client = TestClient(app)

CV_TEXT = b"""Dr. Jane Doe
jane.doe@sejong.ac.kr

EDUCATION
Ph.D. in Geomatics Engineering | INHA University | South Korea | 2013 - 2017

PUBLICATIONS
1. Doe, J., Kim, H. (2024). "Flood susceptibility mapping with deep learning". Journal of Hydrology.
"""


def test_parse_txt_upload():
    files = {"file": ("cv.txt", CV_TEXT, "text/plain")}
    r = client.post("/parse", files=files)
    assert r.status_code == 200
    body = r.json()

    data = body["data"]
    assert data["profile"]["name"] == "Dr. Jane Doe"
    assert data["about"]["education"][0]["institution"] == "INHA University"
    assert data["publications"][0]["year"] == 2024
    assert data["rawHtml"] is None

    # every warning in the list also shows up in meta, as "field: message"
    assert len(body["warnings"]) == len(data["meta"]["warnings"])


def test_parse_converted_payload():
    payload = {
        "text": CV_TEXT.decode(),
        "html": "<p>Dr. Jane Doe</p>",
        "messages": [{"type": "error", "message": "Image could not be converted"}],
    }
    r = client.post("/parse/converted", params={"source_file_name": "jane.docx"}, json=payload)
    assert r.status_code == 200
    body = r.json()
    assert body["data"]["meta"]["sourceFileName"] == "jane.docx"
    assert body["data"]["rawHtml"] == "<p>Dr. Jane Doe</p>"
    assert {"field": "docx", "message": "Image could not be converted"}.items() <= body["warnings"][0].items()


def test_parse_converted_without_text():
    r = client.post("/parse/converted", json={"text": "   "})
    assert r.status_code == 422


def test_validate_round_trip():
    parsed = client.post("/parse", files={"file": ("cv.txt", CV_TEXT, "text/plain")}).json()
    r = client.post("/validate", json=parsed["data"])
    assert r.status_code == 200
    assert r.json()["success"] is True


def test_validate_reports_paths():
    r = client.post("/validate", json={"profile": {"name": ""}})
    body = r.json()
    assert body["success"] is False
    assert ["profile", "name"] in [issue["path"] for issue in body["errors"]]


def test_openapi_documents_tags_and_result_schemas():
    schema = client.get("/openapi.json").json()
    assert [t["name"] for t in schema["tags"]] == ["parse", "validate", "health"]
    assert {"ParseResult", "ValidationResult"} <= set(schema["components"]["schemas"])
    ok = schema["paths"]["/parse/converted"]["post"]["responses"]["200"]
    assert ok["content"]["application/json"]["schema"]["$ref"].endswith("/ParseResult")
