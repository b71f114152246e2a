"""Page fetcher: one bounded GET, then lightweight signal extraction.

Signals (title, meta description, heading counts) are pulled from the raw
HTML with regular expressions rather than a DOM parser, so malformed pages
still yield best-effort values. Does NOT crawl subpages.
"""

import re
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from time import perf_counter

import requests

from config import FETCH_MAX_BYTES, FETCH_TIMEOUT_SECONDS, FETCH_USER_AGENT, FETCH_WORKERS
from logger import get_logger
from models import FetchResult, HeadingCounts, PageSignals

logger = get_logger(__name__)

_CHUNK_BYTES = 8192
_fetch_pool = ThreadPoolExecutor(max_workers=FETCH_WORKERS, thread_name_prefix="page-fetch")

_REQUEST_HEADERS = {
    "User-Agent": FETCH_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

_TITLE_RE = re.compile(r"<title\b[^>]*>([^<]*)</title\s*>", re.IGNORECASE)
_META_DESCRIPTION_RE = re.compile(
    r"<meta\b[^>]*?\bname\s*=\s*[\"']description[\"'][^>]*?\bcontent\s*=\s*([\"'])(.*?)\1",
    re.IGNORECASE | re.DOTALL,
)
_HEADING_RES = {
    level: re.compile(rf"<{level}\b[^>]*>", re.IGNORECASE) for level in ("h1", "h2", "h3")
}


def _failed_fetch(status_code: int, response_time_ms: int) -> FetchResult:
    return {
        "status_code": status_code,
        "response_time_ms": response_time_ms,
        "content_length": 0,
        "raw_html": None,
    }


def _decode(body: bytes, encoding: str | None) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


class _Download:
    """One streamed GET. `cancel` may be called from another thread."""

    def __init__(self, url: str, timeout: float, max_bytes: int) -> None:
        self.url = url
        self.timeout = timeout
        self.max_bytes = max_bytes
        self.cancelled = threading.Event()
        self.response: requests.Response | None = None

    def run(self) -> tuple[int, bytes, str | None]:
        response = requests.get(self.url, timeout=self.timeout, headers=_REQUEST_HEADERS, stream=True)
        self.response = response
        try:
            body = bytearray()
            if not self.cancelled.is_set():
                for chunk in response.iter_content(chunk_size=_CHUNK_BYTES):
                    if self.cancelled.is_set():
                        break
                    body.extend(chunk)
                    if len(body) >= self.max_bytes:
                        if len(body) > self.max_bytes:
                            logger.info("Truncated %s at %s bytes", self.url, self.max_bytes)
                        del body[self.max_bytes:]
                        break
            return response.status_code, bytes(body), response.encoding
        finally:
            response.close()

    def cancel(self) -> None:
        self.cancelled.set()
        if self.response is not None:
            self.response.close()


def fetch_page(
    url: str,
    timeout: float = FETCH_TIMEOUT_SECONDS,
    max_bytes: int = FETCH_MAX_BYTES,
) -> FetchResult:
    """
    Issue exactly one GET for `url` and report what came back.
    `timeout` caps the whole fetch, body included; a slow or trickling
    server is cut off and treated like a timeout. Non-2xx answers are still
    responses. Network failures (timeout, DNS, refused connection) return a
    zeroed result instead of raising.
    """
    started = perf_counter()
    download = _Download(url, timeout, max_bytes)
    future = _fetch_pool.submit(download.run)
    try:
        status_code, body, encoding = future.result(timeout=timeout)
    except FuturesTimeoutError:
        future.cancel()
        download.cancel()
        elapsed_ms = int((perf_counter() - started) * 1000)
        logger.warning("Fetch for %s exceeded %ss, abandoned after %sms", url, timeout, elapsed_ms)
        return _failed_fetch(0, elapsed_ms)
    except (requests.RequestException, ValueError, OSError) as exc:
        elapsed_ms = int((perf_counter() - started) * 1000)
        failed_response = getattr(exc, "response", None)
        status_code = failed_response.status_code if failed_response is not None else 0
        logger.warning("Fetch failed for %s after %sms: %s", url, elapsed_ms, exc.__class__.__name__)
        return _failed_fetch(status_code, elapsed_ms)

    return {
        "status_code": status_code,
        "response_time_ms": int((perf_counter() - started) * 1000),
        "content_length": len(body),
        "raw_html": _decode(body, encoding),
    }


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def extract_title(html: str) -> str | None:
    match = _TITLE_RE.search(html)
    return _clean(match.group(1)) if match else None


def extract_meta_description(html: str) -> str | None:
    match = _META_DESCRIPTION_RE.search(html)
    return _clean(match.group(2)) if match else None


def count_headings(html: str) -> HeadingCounts:
    return {
        "h1": len(_HEADING_RES["h1"].findall(html)),
        "h2": len(_HEADING_RES["h2"].findall(html)),
        "h3": len(_HEADING_RES["h3"].findall(html)),
    }


def extract_signals(raw_html: str | None) -> PageSignals:
    """Total over any input: missing HTML gives empty signals."""
    html = raw_html or ""
    return {
        "title": extract_title(html),
        "meta_description": extract_meta_description(html),
        "headings": count_headings(html),
    }


def analyze_page(url: str) -> tuple[FetchResult, PageSignals]:
    """Fetch `url` and extract its signals; degraded fetches give empty signals."""
    fetched = fetch_page(url)
    return fetched, extract_signals(fetched["raw_html"])
