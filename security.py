"""Security utilities for TrustLens API."""

import asyncio
import ipaddress
import re
import socket
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from urllib.parse import urlparse, urlunparse

from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from api_response import error_response


API_PREFIX = "/v1/api"

# ============== URL Validation ==============

# Allowed URL schemes
ALLOWED_SCHEMES = {"http", "https"}

# Maximum URL length to prevent DoS
MAX_URL_LENGTH = 2048

# Dangerous patterns that might indicate injection attempts
DANGEROUS_PATTERNS = [
    r'javascript:',
    r'data:',
    r'vbscript:',
    r'file:',
    r'<script',
    r'</script',
    r'onerror\s*=',
    r'onload\s*=',
    r'onclick\s*=',
    r'onmouseover\s*=',
    r'onfocus\s*=',
    r'onblur\s*=',
]

# Blocked hostnames (SSRF protection)
BLOCKED_HOSTNAMES = {
    'localhost',
    'localhost.localdomain',
    '127.0.0.1',
    '::1',
    '0.0.0.0',
    'metadata.google.internal',  # GCP metadata
    '169.254.169.254',  # AWS/Azure metadata
    'metadata.internal',
}


# Blocking DNS checks for validate_url_bounded
_validation_executor = ThreadPoolExecutor(max_workers=10, thread_name_prefix="validate")


class URLValidationError(Exception):
    """Raised when URL validation fails."""
    pass


def is_private_ip(ip_str: str) -> bool:
    """Check if an IP address is private/internal."""
    try:
        ip = ipaddress.ip_address(ip_str)
        return (
            ip.is_private or
            ip.is_loopback or
            ip.is_link_local or
            ip.is_multicast or
            ip.is_reserved or
            ip.is_unspecified
        )
    except ValueError:
        return False


def validate_url(url: str | None, allow_internal: bool = False) -> str:
    """
    Validate and sanitize a URL.

    Args:
        url: The URL to validate
        allow_internal: If True, allow internal/private IPs (default False for SSRF protection)

    Returns:
        The sanitized URL

    Raises:
        URLValidationError: If the URL is invalid or potentially malicious
    """
    if not url or not url.strip():
        raise URLValidationError("URL is required")

    # Strip whitespace
    url = url.strip()

    # Check length
    if len(url) > MAX_URL_LENGTH:
        raise URLValidationError(f"URL exceeds maximum length of {MAX_URL_LENGTH} characters")

    # Check for null bytes and newlines (HTTP header injection)
    if '\x00' in url:
        raise URLValidationError("URL contains null bytes")
    if '\n' in url or '\r' in url:
        raise URLValidationError("URL contains newline characters")

    # Check for dangerous patterns before a scheme is added
    url_lower = url.lower()
    for pattern in DANGEROUS_PATTERNS:
        if re.search(pattern, url_lower, re.IGNORECASE):
            raise URLValidationError("URL contains potentially dangerous content")

    # Add scheme if missing
    if not url_lower.startswith(('http://', 'https://')):
        url = f"https://{url}"

    # Parse URL
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        raise URLValidationError("Please provide a valid URL")

    # Validate scheme
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise URLValidationError(f"URL scheme '{parsed.scheme}' is not allowed. Use http or https.")

    # Validate hostname exists and has at least one dot (or is an IP literal)
    if not hostname or ('.' not in hostname and ':' not in hostname):
        raise URLValidationError("Please provide a valid URL")

    # SSRF Protection
    if not allow_internal:
        hostname_lower = hostname.lower()

        if hostname_lower in BLOCKED_HOSTNAMES:
            raise URLValidationError("Access to internal resources is not allowed")

        if is_private_ip(hostname):
            raise URLValidationError("Access to private IP addresses is not allowed")

        # Try to resolve and check if it resolves to a private IP
        try:
            resolved_ips = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
            for family, type_, proto, canonname, sockaddr in resolved_ips:
                if is_private_ip(str(sockaddr[0])):
                    raise URLValidationError("URL resolves to a private IP address")
        except (socket.gaierror, UnicodeError):
            # DNS resolution failed; the probes will record that
            pass

    # Reconstruct the URL to normalize it
    sanitized = urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path,
        parsed.params,
        parsed.query,
        ''  # Remove fragment as it's not sent to server
    ))

    return sanitized


async def validate_url_bounded(
    url: str | None,
    allow_internal: bool = False,
    timeout: float = 5.0,
) -> str:
    """
    Run validate_url off the event loop with a deadline on the DNS check.

    A resolver that does not answer within ``timeout`` seconds fails
    validation rather than letting an unverified host through.
    """
    loop = asyncio.get_running_loop()
    try:
        return await asyncio.wait_for(
            loop.run_in_executor(_validation_executor, validate_url, url, allow_internal),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        raise URLValidationError("Timed out resolving the URL hostname")


# ============== Security Headers Middleware ==============

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        # JSON-only API: nothing should ever be rendered or framed
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"

        # Referrer Policy
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Cache control for sensitive content
        if request.url.path.startswith(API_PREFIX):
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, private"
            response.headers["Pragma"] = "no-cache"

        return response


# ============== Rate Limiting ==============

class RateLimiter:
    """
    Simple in-memory rate limiter.

    Clients are keyed by socket address. Forwarding headers are only honoured
    when ``trust_proxy_headers`` is set, i.e. when a reverse proxy that
    overwrites them sits in front of the app.
    """

    def __init__(
        self,
        requests_per_minute: int = 30,
        requests_per_hour: int = 200,
        trust_proxy_headers: bool = False,
    ):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        self.trust_proxy_headers = trust_proxy_headers
        self.minute_requests: dict[str, list[datetime]] = defaultdict(list)
        self.hour_requests: dict[str, list[datetime]] = defaultdict(list)
        self._last_sweep = datetime.now()
        self._lock = asyncio.Lock()

    def _get_client_ip(self, request: Request) -> str:
        """Get client IP from request, handling trusted proxies."""
        if self.trust_proxy_headers:
            # Check X-Forwarded-For header (from reverse proxy)
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                # Get first IP in chain (original client)
                return forwarded.split(",")[0].strip()

            # Check X-Real-IP header
            real_ip = request.headers.get("X-Real-IP")
            if real_ip:
                return real_ip.strip()

        if request.client:
            return request.client.host

        return "unknown"

    def _cleanup_old_requests(self, client_ip: str, now: datetime):
        """Remove expired request timestamps; forget clients with none left."""
        minute_ago = now - timedelta(minutes=1)
        hour_ago = now - timedelta(hours=1)

        minute = [ts for ts in self.minute_requests.get(client_ip, ()) if ts > minute_ago]
        hour = [ts for ts in self.hour_requests.get(client_ip, ()) if ts > hour_ago]

        if minute or hour:
            self.minute_requests[client_ip] = minute
            self.hour_requests[client_ip] = hour
        else:
            self.minute_requests.pop(client_ip, None)
            self.hour_requests.pop(client_ip, None)

    def _sweep(self, now: datetime):
        """Drop every client whose timestamps have all expired, at most once a minute."""
        if now - self._last_sweep < timedelta(minutes=1):
            return
        self._last_sweep = now
        for client_ip in list(self.hour_requests.keys() | self.minute_requests.keys()):
            self._cleanup_old_requests(client_ip, now)

    async def check_rate_limit(self, request: Request) -> tuple[bool, str | None]:
        """
        Check if request should be rate limited.

        Returns:
            Tuple of (is_allowed, error_message)
        """
        client_ip = self._get_client_ip(request)
        now = datetime.now()

        async with self._lock:
            self._sweep(now)
            self._cleanup_old_requests(client_ip, now)

            # Check minute limit
            if len(self.minute_requests[client_ip]) >= self.requests_per_minute:
                return False, f"Rate limit exceeded. Max {self.requests_per_minute} requests per minute."

            # Check hour limit
            if len(self.hour_requests[client_ip]) >= self.requests_per_hour:
                return False, f"Rate limit exceeded. Max {self.requests_per_hour} requests per hour."

            # Record this request
            self.minute_requests[client_ip].append(now)
            self.hour_requests[client_ip].append(now)

            return True, None


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce rate limiting."""

    def __init__(self, app, rate_limiter: RateLimiter):
        super().__init__(app)
        self.rate_limiter = rate_limiter

    async def dispatch(self, request: Request, call_next) -> Response:
        # Only rate limit API endpoints
        if request.url.path.startswith(API_PREFIX):
            is_allowed, error_message = await self.rate_limiter.check_rate_limit(request)

            if not is_allowed:
                return error_response(
                    status.HTTP_429_TOO_MANY_REQUESTS,
                    error_message,
                    headers={"Retry-After": "60"},
                )

        return await call_next(request)
