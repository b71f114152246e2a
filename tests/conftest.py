# File: tests/conftest.py
import pytest
import requests
from fastapi.testclient import TestClient

import main
import scraper
from backlink_service import BacklinkService
from keyword_service import KeywordService
from leads import InMemoryLeadRepository
from rate_limiter import RollingWindowRateLimiter
from tools import ToolServices

DAY_SECONDS = 24 * 60 * 60


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(html: str, status_code: int = 200) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = html.encode("utf-8")
    response.encoding = "utf-8"
    response._content_consumed = True
    return response


class FakeWeb:
    """Stands in for requests.get; serves one canned response or raises."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.response = make_response("<html></html>")
        self.error: Exception | None = None

    def serve(self, html: str, status_code: int = 200) -> None:
        self.response = make_response(html, status_code)
        self.error = None

    def fail(self, error: Exception) -> None:
        self.error = error

    def get(self, url, timeout=None, headers=None, stream=False):
        self.calls.append({"url": url, "timeout": timeout, "headers": headers, "stream": stream})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def limiter(clock) -> RollingWindowRateLimiter:
    return RollingWindowRateLimiter(window_seconds=DAY_SECONDS, clock=clock)


@pytest.fixture()
def lead_repository() -> InMemoryLeadRepository:
    return InMemoryLeadRepository()


@pytest.fixture()
def tool_services() -> ToolServices:
    return ToolServices(
        analyze_page=scraper.analyze_page,
        keyword_service=KeywordService(delay_seconds=0, seed=7),
        backlink_service=BacklinkService(delay_seconds=0, seed=7),
    )


@pytest.fixture()
def fake_web(monkeypatch) -> FakeWeb:
    web = FakeWeb()
    monkeypatch.setattr(scraper.requests, "get", web.get)
    return web


@pytest.fixture()
def client(limiter, lead_repository, tool_services, fake_web):
    """
    TestClient wired to per-test state: fresh quota windows, an empty lead
    store, zero-delay placeholder services and no real network.
    """
    main.app.dependency_overrides[main.get_rate_limiter] = lambda: limiter
    main.app.dependency_overrides[main.get_lead_repository] = lambda: lead_repository
    main.app.dependency_overrides[main.get_tool_services] = lambda: tool_services
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()
