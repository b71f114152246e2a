# File: tests/test_leads.py
import threading
from datetime import timezone

import pytest

from leads import (
    CAPTURED_MESSAGE,
    DEFAULT_UPGRADE_MESSAGE,
    DUPLICATE_MESSAGE,
    InMemoryLeadRepository,
    capture_lead,
    upgrade_message,
)


def test_capture_records_lead(lead_repository):
    result = capture_lead(lead_repository, "ana@example.com", "website-analyzer", source="https://example.com")

    assert result == {"success": True, "status": "captured", "message": CAPTURED_MESSAGE}
    assert lead_repository.count() == 1
    lead = lead_repository.leads()[0]
    assert lead["email"] == "ana@example.com"
    assert lead["tool"] == "website-analyzer"
    assert lead["source"] == "https://example.com"
    assert lead["timestamp"].tzinfo == timezone.utc


def test_duplicate_is_reported_not_stored(lead_repository):
    capture_lead(lead_repository, "ana@example.com", "keyword-research")
    second = capture_lead(lead_repository, "ana@example.com", "keyword-research")

    assert second == {"success": False, "status": "already_captured", "message": DUPLICATE_MESSAGE}
    assert lead_repository.count() == 1


def test_duplicate_check_ignores_case_and_whitespace(lead_repository):
    capture_lead(lead_repository, "Ana@Example.com", "keyword-research")
    second = capture_lead(lead_repository, "  ana@example.COM ", "keyword-research")

    assert second["status"] == "already_captured"
    assert lead_repository.count() == 1


def test_same_email_for_different_tools(lead_repository):
    capture_lead(lead_repository, "ana@example.com", "keyword-research")
    capture_lead(lead_repository, "ana@example.com", "backlink-checker")

    assert lead_repository.count() == 2
    assert lead_repository.count("keyword-research") == 1
    assert lead_repository.exists("ana@example.com", "backlink-checker")
    assert not lead_repository.exists("ana@example.com", "meta-generator")


@pytest.mark.parametrize("email", ["foo", "foo@", "@bar.com", "foo@bar", "foo bar@baz.com", "", "a@b@c.com"])
def test_invalid_email_never_counted(lead_repository, email):
    result = capture_lead(lead_repository, email, "website-analyzer")

    assert result["success"] is False
    assert result["status"] == "invalid_email"
    assert lead_repository.count() == 0


def test_concurrent_captures_store_one_record():
    repository = InMemoryLeadRepository()
    results = []
    barrier = threading.Barrier(16)

    def worker():
        barrier.wait()
        results.append(capture_lead(repository, "race@example.com", "meta-generator")["status"])

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert repository.count() == 1
    assert results.count("captured") == 1
    assert results.count("already_captured") == 15


def test_upgrade_message_per_tool():
    assert "unlimited pages" in upgrade_message("website-analyzer")
    assert upgrade_message("unknown-tool") == DEFAULT_UPGRADE_MESSAGE
