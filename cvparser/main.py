from fastapi import FastAPI

from cvparser.api.routes.parse import router as parse_router
from cvparser.core.settings import get_settings

TAGS_METADATA = [
    {
        "name": "parse",
        "description": "Turn a CV (DOCX upload, text upload or converter output) into a record plus per-field warnings.",
    },
    {
        "name": "validate",
        "description": "Check a CV record produced or edited elsewhere; every problem is reported with its path.",
    },
    {"name": "health", "description": "Liveness checks."},
]

app = FastAPI(
    title="CV Parser (Academic CV Extraction Service)",
    description="Academic CV parsing: publications, patents, education, positions, awards and contact details",
    version="1.0.0",
    openapi_tags=TAGS_METADATA,
)

app.include_router(parse_router)


@app.get("/", tags=["health"])
def root():
    return {"service": "cvparser", "status": "running", "parserVersion": get_settings().parser_version}


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}
