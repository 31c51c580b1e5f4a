from functools import lru_cache
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


PARSER_VERSION = "v1.0.0"


class ParserSettings(BaseModel):
    """Tunables for one parse call. Passed in explicitly; the core reads no environment."""

    model_config = ConfigDict(frozen=True)

    parser_version: str = PARSER_VERSION
    contact_scan_chars: int = Field(default=2000, gt=0, description="Leading characters rescanned for contact data")
    min_entry_length: int = Field(default=20, ge=1)
    min_publication_length: int = Field(default=30, ge=1)
    default_profile_name: Optional[str] = None
    subject_name_tokens: Tuple[str, ...] = ()


@lru_cache()
def get_settings() -> ParserSettings:
    return ParserSettings()
