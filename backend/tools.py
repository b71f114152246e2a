"""Free SEO tools: per-tool configuration and request orchestration.

Every tool runs the same pipeline: quota check -> input validation ->
quota charge -> tool work -> optional lead capture -> response shaping.
Only unexpected faults escape as ToolFailure; fetch problems are already
folded into zeroed results by the scraper.
"""

from dataclasses import dataclass, field
from typing import Callable

from backlink_service import BacklinkService
from config import DEFAULT_DAILY_LIMIT, FETCH_TIMEOUT_SECONDS, TOOL_DAILY_LIMITS
from keyword_service import KeywordService
from leads import LeadRepository, capture_lead, upgrade_message
from logger import get_logger
from models import FetchResult, PageSignals
from rate_limiter import RateLimitStatus, RollingWindowRateLimiter
from schemas import ToolRequest
from seo_rules import improvement_tips, score_signals, suggest_meta_tags

logger = get_logger(__name__)

TOOL_PREFIX = "/api/tools"
FREE_KEYWORD_SUGGESTIONS = 10
FREE_BACKLINK_LIMIT = 100


class RateLimitExceeded(Exception):
    def __init__(self, tool: str, status: RateLimitStatus) -> None:
        super().__init__(f"Daily limit reached for {tool}")
        self.tool = tool
        self.status = status


class ToolFailure(Exception):
    """An unexpected fault inside a tool. Carries only user-safe text."""

    def __init__(self, title: str, message: str) -> None:
        super().__init__(title)
        self.title = title
        self.message = message


@dataclass
class ToolServices:
    """External collaborators a tool may call."""

    analyze_page: Callable[[str], tuple[FetchResult, PageSignals]]
    keyword_service: KeywordService
    backlink_service: BacklinkService


@dataclass(frozen=True)
class ToolConfig:
    name: str
    validate: Callable[[ToolRequest], str]
    run: Callable[[str, ToolRequest, ToolServices], dict]
    limitations: dict
    upgrade_benefits: tuple[str, ...]
    failure_title: str
    failure_message: str = "Unable to complete the request. Please try again."
    aliases: tuple[str, ...] = field(default_factory=tuple)

    @property
    def daily_limit(self) -> int:
        return TOOL_DAILY_LIMITS.get(self.name, DEFAULT_DAILY_LIMIT)

    @property
    def path(self) -> str:
        return f"{TOOL_PREFIX}/{self.name}"

    @property
    def paths(self) -> list[str]:
        return [self.path] + [f"{TOOL_PREFIX}/{alias}" for alias in self.aliases]


def _page_summary(fetched: FetchResult, signals: PageSignals) -> str:
    if fetched["status_code"] == 0:
        return (
            f"We could not load this page within {FETCH_TIMEOUT_SECONDS:g} seconds, "
            "so only limited results are available."
        )
    return (
        f"Your website has {signals['headings']['h1']} H1 tags and loads in "
        f"{fetched['response_time_ms']}ms. Consider optimizing for better performance."
    )


def run_website_analyzer(url: str, body: ToolRequest, services: ToolServices) -> dict:
    fetched, signals = services.analyze_page(url)
    return {
        "url": url,
        "status_code": fetched["status_code"],
        "response_time": fetched["response_time_ms"],
        "page_size": fetched["content_length"],
        "title": signals["title"],
        "meta_description": signals["meta_description"],
        "headings": dict(signals["headings"]),
        "seo_score": score_signals(signals),
        "ai_insights": {
            "quick_fixes": improvement_tips(signals)[:3],
            "summary": _page_summary(fetched, signals),
        },
    }


def run_meta_generator(url: str, body: ToolRequest, services: ToolServices) -> dict:
    _, signals = services.analyze_page(url)
    title = signals["title"]
    description = signals["meta_description"]
    return {
        "url": url,
        "current_tags": {
            "title": title,
            "description": description,
            "title_length": len(title) if title else 0,
            "description_length": len(description) if description else 0,
        },
        "ai_suggestions": suggest_meta_tags(body.meta_keyword),
        "seo_score": score_signals(signals),
        "improvements": improvement_tips(signals),
    }


def _competition_level(difficulty: int) -> str:
    if difficulty > 70:
        return "High"
    if difficulty > 40:
        return "Medium"
    return "Low"


def run_keyword_research(keyword: str, body: ToolRequest, services: ToolServices) -> dict:
    data = services.keyword_service.research_keyword(keyword, max_suggestions=FREE_KEYWORD_SUGGESTIONS)
    intent = "informational" if len(keyword.split()) > 2 else "commercial"
    return {
        "main_keyword": {
            "keyword": keyword,
            "estimated_volume": data["search_volume"],
            "difficulty": data["difficulty"],
            "cpc": data["cpc"],
            "search_intent": intent,
        },
        "related_keywords": data["related_keywords"][:FREE_KEYWORD_SUGGESTIONS],
        "questions": data["questions"],
        "ai_insights": {
            "content_opportunities": [
                f"Create comprehensive guide about {keyword}",
                f"Write comparison article: 'Best {keyword}'",
                f"Develop FAQ page for {keyword} questions",
            ],
            "competition_level": _competition_level(data["difficulty"]),
            "recommendation": f"Focus on long-tail variations of '{keyword}' for easier ranking",
        },
    }


def run_backlink_checker(domain: str, body: ToolRequest, services: ToolServices) -> dict:
    data = services.backlink_service.check_backlinks(domain, limit=FREE_BACKLINK_LIMIT)
    authority = data["domain_authority"]
    return {
        "domain": domain,
        "estimated_backlinks": data["total"],
        "referring_domains": data["referring_domains"],
        "domain_authority": authority,
        "top_backlinks": data["backlinks"][:10],
        "top_linking_domains": data["top_linking_domains"],
        "ai_insights": {
            "link_quality": "Good" if authority > 50 else "Needs Improvement",
            "opportunities": [
                "Guest posting on industry blogs",
                "Creating linkable assets (infographics, tools)",
                "Building relationships with industry influencers",
            ],
            "toxic_risk": "Low - No suspicious patterns detected",
        },
    }


TOOLS: dict[str, ToolConfig] = {
    tool.name: tool
    for tool in (
        ToolConfig(
            name="website-analyzer",
            aliases=("website-crawler",),
            validate=ToolRequest.require_url,
            run=run_website_analyzer,
            limitations={
                "analysis_type": "Basic (free)",
                "pages_scanned": "1 page (free limit)",
                "upgrade_for": "Deep crawling, JavaScript rendering, full site analysis",
            },
            upgrade_benefits=(
                "Scan unlimited pages",
                "Advanced AI recommendations",
                "Technical SEO analysis",
                "Competitor comparison",
                "Historical tracking",
            ),
            failure_title="Analysis failed",
            failure_message="Unable to analyze website. Please try again.",
        ),
        ToolConfig(
            name="meta-generator",
            aliases=("meta-tag-generator",),
            validate=ToolRequest.require_url,
            run=run_meta_generator,
            limitations={
                "suggestions_shown": "3/unlimited (free limit)",
                "bulk_generation": "Upgrade for bulk meta tag generation",
            },
            upgrade_benefits=(
                "Unlimited meta tag generation",
                "Bulk site-wide optimization",
                "A/B testing variations",
                "Competitive analysis",
                "Historical performance tracking",
            ),
            failure_title="Meta tag generation failed",
            failure_message="Unable to generate meta tags. Please try again.",
        ),
        ToolConfig(
            name="keyword-research",
            validate=ToolRequest.require_keyword,
            run=run_keyword_research,
            limitations={
                "suggestions_shown": f"{FREE_KEYWORD_SUGGESTIONS}/unlimited (free limit)",
                "serp_analysis": "Upgrade for detailed SERP analysis",
            },
            upgrade_benefits=(
                "Unlimited keyword research",
                "Real search volume data",
                "Advanced SERP analysis",
                "Competitor keyword gaps",
                "Bulk keyword processing",
            ),
            failure_title="Keyword research failed",
            failure_message="Unable to research this keyword. Please try again.",
        ),
        ToolConfig(
            name="backlink-checker",
            validate=ToolRequest.require_domain,
            run=run_backlink_checker,
            limitations={
                "backlinks_shown": f"{FREE_BACKLINK_LIMIT} max (free limit)",
                "competitor_analysis": "Upgrade for competitor comparison",
            },
            upgrade_benefits=(
                "Complete backlink profile",
                "Competitor backlink analysis",
                "Link monitoring and alerts",
                "Toxic link detection",
            ),
            failure_title="Backlink analysis failed",
            failure_message="Unable to check backlinks. Please try again.",
        ),
    )
}


def resolve_tool(name: str) -> ToolConfig | None:
    """Look a tool up by canonical name or alias."""
    if name in TOOLS:
        return TOOLS[name]
    for tool in TOOLS.values():
        if name in tool.aliases:
            return tool
    return None


def run_tool(
    tool: ToolConfig,
    body: ToolRequest,
    client_id: str,
    limiter: RollingWindowRateLimiter,
    leads: LeadRepository,
    services: ToolServices,
) -> tuple[dict, RateLimitStatus]:
    """
    Execute one tool request for `client_id`.
    Raises InputValidationError, RateLimitExceeded or ToolFailure.
    """
    status = limiter.peek(client_id, tool.name, tool.daily_limit)
    if not status.allowed:
        raise RateLimitExceeded(tool.name, status)

    subject = tool.validate(body)
    email = body.optional_email()

    status = limiter.hit(client_id, tool.name, tool.daily_limit)
    if not status.allowed:
        raise RateLimitExceeded(tool.name, status)

    try:
        results = tool.run(subject, body, services)
        lead = capture_lead(leads, email, tool.name, source=subject) if email else None
    except Exception as exc:
        logger.exception("%s: unexpected error for %s", tool.name, subject)
        raise ToolFailure(tool.failure_title, tool.failure_message) from exc

    payload = {
        "success": True,
        "results": results,
        "limitations": {**tool.limitations, "daily_requests": f"{tool.daily_limit}/day (free limit)"},
        "upgrade_benefits": list(tool.upgrade_benefits),
    }
    if lead is not None:
        payload["lead_capture"] = {
            "status": lead["status"],
            "message": lead["message"],
            "upgrade_message": upgrade_message(tool.name),
        }
    return payload, status
