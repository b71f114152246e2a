"""Lead storage and capture.

Leads are kept per process and disappear on restart. The repository
protocol keeps the gateway independent of where leads actually live;
a durable store only has to honour one record per (email, tool).
"""

import threading
from datetime import datetime, timezone
from typing import Protocol

from logger import get_logger, mask_email
from models import LeadCaptureResult, LeadRecord
from schemas import is_valid_email

logger = get_logger(__name__)

CAPTURED_MESSAGE = "Successfully subscribed! Check your email for results."
DUPLICATE_MESSAGE = "Email already registered for this tool"
INVALID_EMAIL_MESSAGE = "Invalid email format"

UPGRADE_MESSAGES = {
    "website-analyzer": "Upgrade to Pro for unlimited pages, custom reports, and API access!",
    "backlink-checker": "Get Pro for competitor analysis, historical data, and bulk checking!",
    "keyword-research": "Unlock Pro for keyword difficulty analysis, SERP features, and export options!",
    "meta-generator": "Pro users get AI-powered suggestions, bulk generation, and custom templates!",
}
DEFAULT_UPGRADE_MESSAGE = "Upgrade to Pro for advanced features and unlimited access!"


class LeadRepository(Protocol):
    def record(self, lead: LeadRecord) -> bool:
        """Store `lead`; return False without storing if (email, tool) exists."""
        ...

    def exists(self, email: str, tool: str) -> bool: ...

    def count(self, tool: str | None = None) -> int: ...

    def leads(self, tool: str | None = None) -> list[LeadRecord]: ...


def _lead_key(email: str, tool: str) -> tuple[str, str]:
    return email.strip().lower(), tool


class InMemoryLeadRepository:
    """Process-lifetime lead store."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._leads: list[LeadRecord] = []
        self._keys: set[tuple[str, str]] = set()

    def record(self, lead: LeadRecord) -> bool:
        key = _lead_key(lead["email"], lead["tool"])
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            self._leads.append(lead)
            return True

    def exists(self, email: str, tool: str) -> bool:
        with self._lock:
            return _lead_key(email, tool) in self._keys

    def count(self, tool: str | None = None) -> int:
        return len(self.leads(tool))

    def leads(self, tool: str | None = None) -> list[LeadRecord]:
        with self._lock:
            if tool is None:
                return list(self._leads)
            return [lead for lead in self._leads if lead["tool"] == tool]


def capture_lead(
    repository: LeadRepository,
    email: str,
    tool: str,
    source: str | None = None,
) -> LeadCaptureResult:
    """Record interest in `tool`. A repeat (email, tool) pair is reported, not stored."""
    normalized = (email or "").strip()
    if not is_valid_email(normalized):
        return {"success": False, "status": "invalid_email", "message": INVALID_EMAIL_MESSAGE}

    lead: LeadRecord = {
        "email": normalized,
        "tool": tool,
        "timestamp": datetime.now(timezone.utc),
        "source": source,
    }
    if not repository.record(lead):
        return {"success": False, "status": "already_captured", "message": DUPLICATE_MESSAGE}

    logger.info("New lead captured: %s for %s", mask_email(normalized), tool)
    return {"success": True, "status": "captured", "message": CAPTURED_MESSAGE}


def upgrade_message(tool: str) -> str:
    return UPGRADE_MESSAGES.get(tool, DEFAULT_UPGRADE_MESSAGE)
