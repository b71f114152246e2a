"""Conclusive SEO tools API – FastAPI app and free tool endpoints."""

from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from backlink_service import BacklinkService
from config import FRONTEND_URL, SERVICE_NAME, SERVICE_VERSION, TOOL_DAILY_LIMITS, TRUST_PROXY_HEADERS
from keyword_service import KeywordService
from leads import (
    INVALID_EMAIL_MESSAGE,
    InMemoryLeadRepository,
    LeadRepository,
    capture_lead,
    upgrade_message,
)
from logger import configure_logging, get_logger
from rate_limiter import LIMIT_REACHED_MESSAGE, RollingWindowRateLimiter
from schemas import (
    HealthResponse,
    InputValidationError,
    LeadCaptureResponse,
    LeadRequest,
    LeadStatsResponse,
    ToolRequest,
)
from scraper import analyze_page
from tools import TOOLS, RateLimitExceeded, ToolFailure, ToolServices, resolve_tool, run_tool

configure_logging()
logger = get_logger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body"

app = FastAPI(
    title="Conclusive SEO Tools API",
    description="Free SEO tools with daily limits and lead capture",
    version=SERVICE_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_rate_limiter = RollingWindowRateLimiter()
_lead_repository = InMemoryLeadRepository()
_tool_services = ToolServices(
    analyze_page=analyze_page,
    keyword_service=KeywordService(),
    backlink_service=BacklinkService(),
)


def get_rate_limiter() -> RollingWindowRateLimiter:
    return _rate_limiter


def get_lead_repository() -> LeadRepository:
    return _lead_repository


def get_tool_services() -> ToolServices:
    return _tool_services


def client_identity(request: Request) -> str:
    """Rate-limit key for the caller: first proxy hop if trusted, else peer address."""
    if TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def available_endpoints() -> list[str]:
    endpoints = ["GET /health", "GET /"]
    endpoints.extend(f"POST {tool.path}" for tool in TOOLS.values())
    endpoints.extend(["POST /api/leads", "GET /api/leads/stats"])
    return endpoints


def tool_request(tool_name: str):
    """
    Dependency that yields the parsed body for `tool_name`, checking quota first.
    A caller already at the ceiling gets 429 even when the body is unreadable.
    """
    tool = TOOLS[tool_name]

    def check_quota(request: Request, limiter: RollingWindowRateLimiter = Depends(get_rate_limiter)) -> None:
        status = limiter.peek(client_identity(request), tool.name, tool.daily_limit)
        if not status.allowed:
            raise RateLimitExceeded(tool.name, status)

    async def parse_body(request: Request, _quota: None = Depends(check_quota)) -> ToolRequest:
        try:
            data = await request.json()
        except ValueError as exc:
            raise InputValidationError(INVALID_BODY_MESSAGE) from exc
        if not isinstance(data, dict):
            raise InputValidationError(INVALID_BODY_MESSAGE)
        try:
            return ToolRequest.model_validate(data)
        except ValidationError as exc:
            raise InputValidationError(INVALID_BODY_MESSAGE) from exc

    return parse_body


@app.on_event("startup")
def startup() -> None:
    logger.info("%s %s starting; daily tool limits: %s", SERVICE_NAME, SERVICE_VERSION, TOOL_DAILY_LIMITS)


@app.exception_handler(InputValidationError)
def handle_input_error(request: Request, exc: InputValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
def handle_body_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": INVALID_BODY_MESSAGE})


@app.exception_handler(RateLimitExceeded)
def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.info("Daily limit reached for %s by %s", exc.tool, client_identity(request))
    headers = exc.status.headers()
    headers["Retry-After"] = str(exc.status.reset_after_seconds)
    return JSONResponse(status_code=429, content={"error": LIMIT_REACHED_MESSAGE}, headers=headers)


@app.exception_handler(ToolFailure)
def handle_tool_failure(request: Request, exc: ToolFailure) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": exc.title, "message": exc.message})


@app.exception_handler(StarletteHTTPException)
def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": f"Route {request.url.path} not found",
                "available_endpoints": available_endpoints(),
            },
        )
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)


@app.exception_handler(Exception)
def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error", "message": "Something went wrong"})


def _tool_response(
    tool_name: str,
    body: ToolRequest,
    request: Request,
    limiter: RollingWindowRateLimiter,
    leads: LeadRepository,
    services: ToolServices,
) -> JSONResponse:
    payload, status = run_tool(TOOLS[tool_name], body, client_identity(request), limiter, leads, services)
    return JSONResponse(content=payload, headers=status.headers())


@app.post("/api/tools/website-analyzer")
@app.post("/api/tools/website-crawler", include_in_schema=False)
def website_analyzer(
    *,
    body: ToolRequest = Depends(tool_request("website-analyzer")),
    request: Request,
    limiter: RollingWindowRateLimiter = Depends(get_rate_limiter),
    leads: LeadRepository = Depends(get_lead_repository),
    services: ToolServices = Depends(get_tool_services),
) -> JSONResponse:
    """Fetch one page, extract title/description/headings and score them."""
    return _tool_response("website-analyzer", body, request, limiter, leads, services)


@app.post("/api/tools/meta-generator")
@app.post("/api/tools/meta-tag-generator", include_in_schema=False)
def meta_generator(
    *,
    body: ToolRequest = Depends(tool_request("meta-generator")),
    request: Request,
    limiter: RollingWindowRateLimiter = Depends(get_rate_limiter),
    leads: LeadRepository = Depends(get_lead_repository),
    services: ToolServices = Depends(get_tool_services),
) -> JSONResponse:
    """Show the page's current tags and suggest keyword-based replacements."""
    return _tool_response("meta-generator", body, request, limiter, leads, services)


@app.post("/api/tools/keyword-research")
def keyword_research(
    *,
    body: ToolRequest = Depends(tool_request("keyword-research")),
    request: Request,
    limiter: RollingWindowRateLimiter = Depends(get_rate_limiter),
    leads: LeadRepository = Depends(get_lead_repository),
    services: ToolServices = Depends(get_tool_services),
) -> JSONResponse:
    return _tool_response("keyword-research", body, request, limiter, leads, services)


@app.post("/api/tools/backlink-checker")
def backlink_checker(
    *,
    body: ToolRequest = Depends(tool_request("backlink-checker")),
    request: Request,
    limiter: RollingWindowRateLimiter = Depends(get_rate_limiter),
    leads: LeadRepository = Depends(get_lead_repository),
    services: ToolServices = Depends(get_tool_services),
) -> JSONResponse:
    return _tool_response("backlink-checker", body, request, limiter, leads, services)


@app.post("/api/leads", response_model=LeadCaptureResponse)
def subscribe_lead(
    body: LeadRequest,
    leads: LeadRepository = Depends(get_lead_repository),
) -> JSONResponse:
    """Capture an email for a tool outside of a tool run."""
    tool = resolve_tool(body.tool)
    if tool is None:
        raise InputValidationError("Unknown tool")

    result = capture_lead(leads, body.email, tool.name, source=body.source)
    if result["status"] == "invalid_email":
        raise InputValidationError(INVALID_EMAIL_MESSAGE)

    response = LeadCaptureResponse(**result, upgrade_message=upgrade_message(tool.name))
    status_code = 201 if result["status"] == "captured" else 200
    return JSONResponse(status_code=status_code, content=response.model_dump())


@app.get("/api/leads/stats", response_model=LeadStatsResponse)
def lead_stats(leads: LeadRepository = Depends(get_lead_repository)) -> LeadStatsResponse:
    return LeadStatsResponse(
        total=leads.count(),
        by_tool={name: leads.count(name) for name in TOOLS},
    )


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Health check for deployment."""
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
    )


@app.get("/")
def index() -> dict:
    return {
        "message": "Conclusive Digital SEO Tool API",
        "status": "running",
        "tools": [tool.path for tool in TOOLS.values()],
    }


if __name__ == "__main__":
    import os

    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "5000"))
    uvicorn.run("main:app", host=host, port=port, reload=False)
