import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from api_response import ApiResponse, error_response
from config import configure_logging, load_settings, validate_settings
from http_client import close_http_client
from scorers import Collaborators, TrustScorer
from security import (
    API_PREFIX,
    RateLimiter,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
    URLValidationError,
    validate_url_bounded,
)

settings = load_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown."""
    # Startup
    for warning in validate_settings(settings):
        logger.warning(warning)
    yield
    # Shutdown - cleanup resources
    await close_http_client()


app = FastAPI(
    title="TrustLens API",
    description="Website trust scoring API - combines WHOIS, TLS, hosting and AI visual signals into a 0-100 trust score",
    version="0.1.0",
    lifespan=lifespan,
)

# Add security middleware
app.add_middleware(SecurityHeadersMiddleware)

# Add rate limiting
rate_limiter = RateLimiter(
    requests_per_minute=settings.requests_per_minute,
    requests_per_hour=settings.requests_per_hour,
    trust_proxy_headers=settings.trust_proxy_headers,
)
app.add_middleware(RateLimitMiddleware, rate_limiter=rate_limiter)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# Initialize the scorer
scorer = TrustScorer(Collaborators.from_settings(settings))


class CheckRequest(BaseModel):
    """Request model for URL analysis."""
    url: str | None = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "url": "https://example.com"
            }
        }
    }


# ============== Error handling ==============

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ============== API Routes ==============

@app.get(f"{API_PREFIX}/health")
async def health_check():
    """Health check endpoint."""
    return ApiResponse.ok({"status": "healthy"})


@app.post(f"{API_PREFIX}/url/check", response_model=ApiResponse)
async def check_url(request: CheckRequest):
    """
    Score how trustworthy a website is.

    Combines five subscores:
    - **URL Structure** (20): typosquatting, suspicious TLDs and keywords
    - **Domain Age** (20): WHOIS creation date
    - **SSL Certificate** (20): validity and issuing CA
    - **Hosting** (10): reverse DNS of the serving IP
    - **Visual Analysis** (30): AI review of a rendered screenshot

    Returns a trust score (0-100) and a safe/suspicious/dangerous verdict.
    """
    try:
        validated_url = await validate_url_bounded(
            request.url,
            allow_internal=settings.allow_internal_urls,
            timeout=settings.dns_timeout,
        )
    except URLValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    try:
        assessment = await scorer.analyze(validated_url)
    except Exception:
        logger.exception("Analysis of %s failed", validated_url)
        # Generic error message to avoid leaking internal details
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Analysis failed. Please verify the URL and try again."
        )

    return ApiResponse.ok(assessment.to_dict(), "Website analysis completed")
