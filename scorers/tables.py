"""Static lookup tables used by the scorers.

Loaded once at import time and handed to each scorer through its constructor,
so tests can swap in their own tables.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


# Common brand names for typosquatting detection with their official sites.
# Iteration order matters: only the first matching brand is reported.
POPULAR_BRANDS: Mapping[str, str] = MappingProxyType({
    "google": "https://www.google.com",
    "facebook": "https://www.facebook.com",
    "amazon": "https://www.amazon.com",
    "microsoft": "https://www.microsoft.com",
    "apple": "https://www.apple.com",
    "netflix": "https://www.netflix.com",
    "paypal": "https://www.paypal.com",
    "instagram": "https://www.instagram.com",
    "twitter": "https://twitter.com",
    "linkedin": "https://www.linkedin.com",
    "github": "https://github.com",
    "dropbox": "https://www.dropbox.com",
    "adobe": "https://www.adobe.com",
    "oracle": "https://www.oracle.com",
    "salesforce": "https://www.salesforce.com",
    "zoom": "https://zoom.us",
    "slack": "https://slack.com",
    "spotify": "https://www.spotify.com",
    "youtube": "https://www.youtube.com",
    "whatsapp": "https://www.whatsapp.com",
    "telegram": "https://telegram.org",
    "chase": "https://www.chase.com",
    "wellsfargo": "https://www.wellsfargo.com",
    "citibank": "https://www.citi.com",
    "americanexpress": "https://www.americanexpress.com",
    "visa": "https://www.visa.com",
    "mastercard": "https://www.mastercard.com",
    "hotstar": "https://www.hotstar.com",
    "jio": "https://www.jio.com",
})

# Suspicious keywords commonly used in phishing (order = warning order)
SUSPICIOUS_KEYWORDS: tuple[str, ...] = (
    "login", "signin", "verify", "account", "update", "secure", "banking",
    "confirm", "suspended", "locked", "urgent", "alert", "warning", "security",
    "validation", "authenticate", "password", "credential", "billing", "payment",
)

# TLDs often used for malicious purposes
SUSPICIOUS_TLDS: frozenset[str] = frozenset({
    ".tk", ".ml", ".ga", ".cf", ".gq", ".xyz", ".top", ".work", ".click",
    ".link", ".download", ".stream", ".loan", ".win", ".bid", ".racing",
})

# Certificate authorities credited with the full certificate score
TRUSTED_ISSUERS: tuple[str, ...] = (
    "Amazon", "Let's Encrypt", "DigiCert", "Cloudflare", "Google", "Microsoft",
)

# Reverse-DNS tokens of known good hosting providers
REPUTABLE_PROVIDERS: tuple[str, ...] = (
    "cloudfront", "amazonaws", "googleusercontent", "azure", "cloudflare",
)


@dataclass(frozen=True)
class ScoringTables:
    """Bundle of every table the scorers consult."""

    brands: Mapping[str, str] = field(default_factory=lambda: POPULAR_BRANDS)
    suspicious_keywords: tuple[str, ...] = SUSPICIOUS_KEYWORDS
    suspicious_tlds: frozenset[str] = SUSPICIOUS_TLDS
    trusted_issuers: tuple[str, ...] = TRUSTED_ISSUERS
    reputable_providers: tuple[str, ...] = REPUTABLE_PROVIDERS


DEFAULT_TABLES = ScoringTables()
