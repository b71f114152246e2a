"""Pydantic schemas for API request/response, plus input format checks."""

import re

from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
DOMAIN_PATTERN = re.compile(
    r"^(?:[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?\.)+[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$",
    re.IGNORECASE,
)

_HTTP_URL = TypeAdapter(HttpUrl)


class InputValidationError(ValueError):
    """Client input is malformed. The message is safe to return as-is."""


def is_valid_url(value: str) -> bool:
    if not value:
        return False
    try:
        parsed = _HTTP_URL.validate_python(value)
    except ValidationError:
        return False
    return bool(parsed.host)


def is_valid_domain(value: str) -> bool:
    return bool(value) and DOMAIN_PATTERN.match(value) is not None


def is_valid_email(value: str) -> bool:
    return bool(value) and EMAIL_PATTERN.match(value) is not None


def _normalize_text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


class ToolRequest(BaseModel):
    """Request body shared by every POST /api/tools/* endpoint."""

    url: str = ""
    domain: str = ""
    keyword: str = ""
    target_keyword: str = ""
    email: str = ""

    @field_validator("url", "domain", "keyword", "target_keyword", "email", mode="before")
    @classmethod
    def normalize_text_fields(cls, value: object) -> str:
        return _normalize_text(value)

    def require_url(self) -> str:
        if not is_valid_url(self.url):
            raise InputValidationError("Valid URL required")
        return self.url

    def require_domain(self) -> str:
        if not is_valid_domain(self.domain):
            raise InputValidationError("Valid domain required")
        return self.domain

    def require_keyword(self) -> str:
        if not self.keyword:
            raise InputValidationError("Keyword required")
        return self.keyword

    def optional_email(self) -> str | None:
        if not self.email:
            return None
        if not is_valid_email(self.email):
            raise InputValidationError("Valid email required")
        return self.email

    @property
    def meta_keyword(self) -> str:
        return self.keyword or self.target_keyword


class LeadRequest(BaseModel):
    """Request body for POST /api/leads."""

    email: str
    tool: str
    source: str | None = None

    @field_validator("email", "tool", mode="before")
    @classmethod
    def normalize_text_fields(cls, value: object) -> str:
        return _normalize_text(value)

    @field_validator("source", mode="before")
    @classmethod
    def normalize_source(cls, value: object) -> str | None:
        text = _normalize_text(value)
        return text or None


class LeadCaptureResponse(BaseModel):
    success: bool
    status: str
    message: str
    upgrade_message: str


class LeadStatsResponse(BaseModel):
    total: int
    by_tool: dict[str, int] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    service: str
    version: str
