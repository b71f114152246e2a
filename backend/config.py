"""Runtime configuration.

Values can be overridden in a .env file in the backend root, e.g.:

FRONTEND_URL=https://tools.conclusive.digital
TOOL_LIMIT_WEBSITE_ANALYZER=3

The app loads environment variables automatically using python-dotenv.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

_log = logging.getLogger(__name__)


def _env_int(key: str, default: int) -> int:
    value = os.getenv(key, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        _log.warning("Invalid integer for %s: %r, using default: %s", key, value, default)
        return default


def _env_float(key: str, default: float) -> float:
    value = os.getenv(key, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        _log.warning("Invalid number for %s: %r, using default: %s", key, value, default)
        return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key, "").strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


SERVICE_NAME = os.getenv("SERVICE_NAME", "conclusive-seo-backend").strip() or "conclusive-seo-backend"
SERVICE_VERSION = os.getenv("SERVICE_VERSION", "1.0.0").strip() or "1.0.0"
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000").strip()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

FETCH_TIMEOUT_SECONDS = _env_float("FETCH_TIMEOUT_SECONDS", 10.0)
FETCH_USER_AGENT = (
    os.getenv("FETCH_USER_AGENT", "").strip()
    or "ConclusiveSEO/1.0 (+https://conclusive.digital)"
)
FETCH_MAX_BYTES = _env_int("FETCH_MAX_BYTES", 2_000_000)
FETCH_WORKERS = _env_int("FETCH_WORKERS", 16)

RATE_LIMIT_WINDOW_SECONDS = _env_float("RATE_LIMIT_WINDOW_SECONDS", 24 * 60 * 60)
TRUST_PROXY_HEADERS = _env_bool("TRUST_PROXY_HEADERS", False)

TOOL_DAILY_LIMITS = {
    "website-analyzer": _env_int("TOOL_LIMIT_WEBSITE_ANALYZER", 3),
    "meta-generator": _env_int("TOOL_LIMIT_META_GENERATOR", 5),
    "keyword-research": _env_int("TOOL_LIMIT_KEYWORD_RESEARCH", 10),
    "backlink-checker": _env_int("TOOL_LIMIT_BACKLINK_CHECKER", 5),
}
DEFAULT_DAILY_LIMIT = 5

MOCK_SERVICE_DELAY_SECONDS = _env_float("MOCK_SERVICE_DELAY_SECONDS", 0.6)
