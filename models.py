"""Observation records produced by the probes and the AI oracle."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class WhoisRecord:
    """Parsed WHOIS response. ``raw`` holds a placeholder when the lookup failed."""

    raw: str
    domain_name: str | None = None
    registrar: str | None = None
    creation_date: str | None = None
    expiration_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"raw": self.raw}
        if self.domain_name:
            data["domainName"] = self.domain_name
        if self.registrar:
            data["registrar"] = self.registrar
        if self.creation_date:
            data["creationDate"] = self.creation_date
        if self.expiration_date:
            data["expirationDate"] = self.expiration_date
        return data


@dataclass(frozen=True)
class CertificateRecord:
    """TLS certificate served by a host."""

    valid: bool
    subject: dict[str, str] = field(default_factory=dict)
    issuer: dict[str, str] = field(default_factory=dict)
    valid_from: str = ""
    valid_to: str = ""
    days_remaining: int = 0

    @property
    def issuer_name(self) -> str:
        return self.issuer.get("O") or self.issuer.get("CN") or ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "subject": dict(self.subject),
            "issuer": dict(self.issuer),
            "validFrom": self.valid_from,
            "validTo": self.valid_to,
            "daysRemaining": self.days_remaining,
        }


@dataclass(frozen=True)
class HostingRecord:
    ip: str
    reverse: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"ip": self.ip, "reverse": self.reverse or ""}


@dataclass(frozen=True)
class ScreenshotResult:
    mime: str
    data: bytes


@dataclass(frozen=True)
class AIVerdict:
    """Verdict returned by the AI oracle."""

    result: str  # safe | suspicious | dangerous
    reasons: tuple[str, ...] = ()
    legitimate_url: str | None = None
    brand_name: str | None = None

    @property
    def has_impersonation_hint(self) -> bool:
        return bool(self.legitimate_url and self.brand_name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"result": self.result, "reasons": list(self.reasons)}
        if self.legitimate_url:
            data["legitimate_url"] = self.legitimate_url
        if self.brand_name:
            data["brand_name"] = self.brand_name
        return data


@dataclass(frozen=True)
class AIError:
    """Marker for an unreachable, misconfigured or malformed AI oracle."""

    error: str
    details: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"error": self.error}
        if self.details:
            data["details"] = self.details
        return data
