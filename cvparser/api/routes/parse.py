from typing import Any

from fastapi import APIRouter, Body, File, HTTPException, UploadFile

from cvparser.core.aggregator import parse_cv
from cvparser.core.docx_extractor import DocumentConversionError, convert_docx
from cvparser.core.schemas import ConversionResult, ParseResult
from cvparser.core.validator import ValidationResult, validate_record

router = APIRouter(tags=["parse"])

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_CONTENT_TYPES = {"text/plain", "text/markdown"}


@router.post(
    "/parse",
    response_model=ParseResult,
    summary="Parse CV",
    description="Extract a structured academic CV record from an uploaded DOCX or TXT file. Every field that could not be resolved is reported as a warning rather than an error.",
    responses={
        200: {
            "description": "Successfully parsed CV",
            "content": {
                "application/json": {
                    "example": {
                        "data": {
                            "profile": {"name": "Dr. Jane Doe", "title": "Associate Professor"},
                            "publications": [
                                {
                                    "id": "deep-learning-for-urban-mappi-1a2b3c4d",
                                    "title": "Deep Learning for Urban Mapping",
                                    "year": 2021,
                                    "type": "journal",
                                }
                            ],
                            "counts": {"publications": 1, "patents": 0, "projects": 0, "awards": 0, "students": 0},
                            "meta": {"sourceFileName": "cv.docx", "parserVersion": "v1.0.0", "warnings": []},
                        },
                        "warnings": [],
                    }
                }
            },
        },
        400: {"description": "Empty file uploaded"},
        415: {"description": "Unsupported file format"},
        422: {"description": "File could not be read or has no extractable text"},
    },
)
async def parse_upload(
    file: UploadFile = File(..., description="CV file (DOCX or TXT format)")
):
    """
    Parse a CV file into a record plus warnings.

    **Supported formats:**
    - DOCX (.docx)
    - TXT / Markdown (.txt, .md)
    """
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty file uploaded.")

    filename = file.filename or "upload"
    lowered = filename.lower()
    content_type = (file.content_type or "").lower()

    if lowered.endswith(".docx") or content_type == DOCX_CONTENT_TYPE:
        try:
            conversion = convert_docx(raw)
        except DocumentConversionError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
    elif lowered.endswith((".txt", ".md")) or content_type in TEXT_CONTENT_TYPES:
        conversion = ConversionResult(text=raw.decode("utf-8", errors="replace"))
    else:
        raise HTTPException(status_code=415, detail=f"Unsupported content type: {file.content_type}")

    if not conversion.text.strip():
        raise HTTPException(status_code=422, detail="Document has no extractable text.")

    return parse_cv(conversion, filename)


@router.post(
    "/parse/converted",
    response_model=ParseResult,
    summary="Parse converted CV",
    description="Parse text, HTML and converter messages produced by an external document converter.",
)
def parse_converted(conversion: ConversionResult, source_file_name: str = "converted.docx"):
    if not conversion.text.strip():
        raise HTTPException(status_code=422, detail="Conversion has no text.")
    return parse_cv(conversion, source_file_name)


@router.post(
    "/validate",
    response_model=ValidationResult,
    response_model_exclude_none=True,
    tags=["validate"],
    summary="Validate CV record",
    description="Check a CV record (camelCase JSON) against the record schema and list every problem with its path.",
)
def validate(candidate: Any = Body(...)):
    return validate_record(candidate)
