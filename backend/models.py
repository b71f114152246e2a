"""Data models and types used across the backend.

Request/response bodies are pydantic models in schemas.py.
Types for fetch results, page signals, suggestions and leads live here.
"""

from datetime import datetime
from typing import Literal, TypedDict


class FetchResult(TypedDict):
    """Outcome of one outbound GET. Zeroed on failure."""

    status_code: int
    response_time_ms: int
    content_length: int
    raw_html: str | None


class HeadingCounts(TypedDict):
    h1: int
    h2: int
    h3: int


class PageSignals(TypedDict):
    """On-page attributes extracted from raw HTML."""

    title: str | None
    meta_description: str | None
    headings: HeadingCounts


class MetaSuggestion(TypedDict):
    kind: Literal["title", "description"]
    text: str
    length: int


class LeadRecord(TypedDict):
    email: str
    tool: str
    timestamp: datetime
    source: str | None


class LeadCaptureResult(TypedDict):
    success: bool
    status: Literal["captured", "already_captured", "invalid_email"]
    message: str
