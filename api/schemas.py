from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from ogmeta.urls import is_valid_url


class MetadataRequest(BaseModel):
    url: str
    include_all_meta: bool = False
    include_html: bool = False
    include_response_headers: bool = False
    timeout: int = Field(default=5000, ge=1, le=60000)    # milliseconds
    headers: dict[str, str] = {}                        # forwarded to the fetcher

    @field_validator("url")
    @classmethod
    def url_must_be_absolute(cls, v: str) -> str:
        if not is_valid_url(v):
            raise ValueError("URL must be a well-formed absolute URL")
        return v


class MetadataResponse(BaseModel):
    url: str

    standard: Optional[dict[str, str]] = None
    og: Optional[dict[str, str]] = None
    twitter: Optional[dict[str, str]] = None
    other: Optional[dict[str, Any]] = None     # raw names -> content, plus "links": [{rel, href}]

    html: Optional[str] = None
    headers: Optional[dict[str, str]] = None


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    detail: str
    code: str                       # upstream_error | internal_error
    url: Optional[str] = None       # the requested URL, on upstream errors
