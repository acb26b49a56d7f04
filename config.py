"""Configuration management for TrustLens."""

import logging
import os
import sys
from dataclasses import dataclass, field

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application configuration loaded from environment."""

    # AI oracle
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"  # needs vision support
    openai_base_url: str = "https://api.openai.com/v1"
    openai_timeout: float = 30.0
    openai_max_tokens: int = 1000

    # Screenshot storage
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_folder: str = "screenshots"

    # Probe timeouts (seconds)
    whois_timeout: float = 5.0
    ssl_timeout: float = 5.0
    dns_timeout: float = 5.0
    screenshot_timeout: float = 30.0
    screenshot_concurrency: int = 2

    # HTTP surface
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    requests_per_minute: int = 30
    requests_per_hour: int = 200
    trust_proxy_headers: bool = False
    allow_internal_urls: bool = False

    log_level: str = "INFO"

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_api_key and self.cloudinary_api_secret)


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def load_settings() -> Settings:
    """Load configuration from environment variables."""
    load_dotenv()

    cors_raw = os.getenv("TRUSTLENS_CORS_ORIGINS", "").strip()

    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/"),
        openai_timeout=float(os.getenv("OPENAI_TIMEOUT", "30")),
        openai_max_tokens=int(os.getenv("OPENAI_MAX_TOKENS", "1000")),
        cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME", ""),
        cloudinary_api_key=os.getenv("CLOUDINARY_API_KEY", ""),
        cloudinary_api_secret=os.getenv("CLOUDINARY_API_KEY_SECRET", ""),
        cloudinary_folder=os.getenv("CLOUDINARY_FOLDER", "screenshots"),
        whois_timeout=float(os.getenv("WHOIS_TIMEOUT", "5")),
        ssl_timeout=float(os.getenv("SSL_TIMEOUT", "5")),
        dns_timeout=float(os.getenv("DNS_TIMEOUT", "5")),
        screenshot_timeout=float(os.getenv("SCREENSHOT_TIMEOUT", "30")),
        screenshot_concurrency=max(1, int(os.getenv("SCREENSHOT_CONCURRENCY", "2"))),
        cors_origins=_split_csv(cors_raw) if cors_raw else ["http://localhost:3000"],
        requests_per_minute=int(os.getenv("RATE_LIMIT_PER_MINUTE", "30")),
        requests_per_hour=int(os.getenv("RATE_LIMIT_PER_HOUR", "200")),
        trust_proxy_headers=os.getenv("TRUST_PROXY_HEADERS", "false").lower() == "true",
        allow_internal_urls=os.getenv("ALLOW_INTERNAL_URLS", "false").lower() == "true",
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def validate_settings(settings: Settings) -> list[str]:
    """Return warnings for optional integrations that are switched off."""
    warnings: list[str] = []
    if not settings.openai_api_key:
        warnings.append("OPENAI_API_KEY not configured; visual analysis will be scored as unavailable")
    if not settings.cloudinary_configured:
        warnings.append("Cloudinary credentials missing; screenshots will not be uploaded")
    return warnings


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )
