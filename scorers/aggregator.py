"""Aggregator for all scoring modules."""

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, TypeVar
from urllib.parse import urlparse

from config import Settings
from models import (
    AIError,
    AIVerdict,
    CertificateRecord,
    HostingRecord,
    ScreenshotResult,
    WhoisRecord,
)
from oracle import Classifier, OpenAIClassifier
from probes import (
    CertificateProbe,
    CloudinaryUploader,
    HostingProbe,
    ScreenshotCapture,
    WhoisLookup,
)
from probes.whois_lookup import WHOIS_ERROR
from security import URLValidationError, validate_url_bounded

from .base import ScoreComponent, URLAnalysisResult
from .domain_age import DomainAgeScorer
from .hosting_scorer import HostingScorer
from .ssl_checker import SSLScorer
from .tables import DEFAULT_TABLES, ScoringTables
from .url_analyzer import URLAnalyzerScorer
from .visual import VisualScorer

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Raw WHOIS text is kept in the response but trimmed in the AI prompt
MAX_PROMPT_WHOIS_CHARS = 2000


@dataclass
class Collaborators:
    """External services the pipeline talks to. Each one is swappable."""

    whois: Callable[[str], Awaitable[WhoisRecord]]
    certificate: Callable[[str], Awaitable[CertificateRecord | None]]
    hosting: Callable[[str], Awaitable[HostingRecord | None]]
    screenshot: Callable[[str], Awaitable[ScreenshotResult | None]]
    upload: Callable[[ScreenshotResult], Awaitable[str]]
    classifier: Classifier
    # Vets URLs the pipeline did not receive from the caller
    url_guard: Callable[[str], Awaitable[str]] = validate_url_bounded

    @classmethod
    def from_settings(cls, settings: Settings) -> "Collaborators":
        return cls(
            whois=WhoisLookup(timeout=settings.whois_timeout),
            certificate=CertificateProbe(timeout=settings.ssl_timeout),
            hosting=HostingProbe(timeout=settings.dns_timeout),
            screenshot=ScreenshotCapture(
                timeout=settings.screenshot_timeout,
                concurrency=settings.screenshot_concurrency,
            ),
            upload=CloudinaryUploader(
                cloud_name=settings.cloudinary_cloud_name,
                api_key=settings.cloudinary_api_key,
                api_secret=settings.cloudinary_api_secret,
                folder=settings.cloudinary_folder,
            ),
            classifier=OpenAIClassifier(
                api_key=settings.openai_api_key,
                model=settings.openai_model,
                base_url=settings.openai_base_url,
                timeout=settings.openai_timeout,
                max_tokens=settings.openai_max_tokens,
            ),
            url_guard=functools.partial(
                validate_url_bounded,
                allow_internal=settings.allow_internal_urls,
                timeout=settings.dns_timeout,
            ),
        )


@dataclass(frozen=True)
class Impersonation:
    """AI claim that the site imitates a brand, with the real site for comparison."""

    brand_name: str
    legitimate_url: str
    legitimate_screenshot_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "brand_name": self.brand_name,
            "legitimate_url": self.legitimate_url,
            "legitimate_screenshot_url": self.legitimate_screenshot_url,
        }


@dataclass(frozen=True)
class TrustAssessment:
    """Complete trust report for a URL."""

    result: str  # "safe", "suspicious", "dangerous"
    trust_score: int  # 0-100
    score_breakdown: dict[str, ScoreComponent]
    key_factors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    url: str = ""
    hostname: str = ""
    ai_analysis: AIVerdict | AIError | None = None
    impersonation: Impersonation | None = None
    technical_details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert report to dictionary."""
        data: dict[str, Any] = {
            "url": self.url,
            "hostname": self.hostname,
            "result": self.result,
            "trust_score": self.trust_score,
            "score_breakdown": {
                name: component.to_dict()
                for name, component in self.score_breakdown.items()
            },
            "key_factors": list(self.key_factors),
            "warnings": list(self.warnings),
            "ai_analysis": self.ai_analysis.to_dict() if self.ai_analysis else None,
            "technical_details": self.technical_details,
        }
        if self.impersonation is not None:
            data["impersonation"] = self.impersonation.to_dict()
        return data


def normalize_target(url: str) -> tuple[str, str]:
    """Return (full_url, hostname), assuming https when no scheme is given."""
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    hostname = urlparse(url).hostname or ""
    if not hostname:
        raise ValueError("URL must have a valid hostname")
    return url, hostname


class TrustScorer:
    """
    Main scorer that combines all individual scoring modules.

    Every subscore has its own ceiling (URL 20, domain age 20, certificate 20,
    hosting 10, visual 30) so the plain sum is already on a 0-100 scale.
    """

    def __init__(
        self,
        collaborators: Collaborators | None = None,
        tables: ScoringTables = DEFAULT_TABLES,
    ):
        self.collaborators = collaborators
        self.url_analyzer = URLAnalyzerScorer(tables)
        self.domain_age = DomainAgeScorer()
        self.ssl = SSLScorer(tables)
        self.hosting = HostingScorer(tables)
        self.visual = VisualScorer()

    def _calculate_verdict(self, score: int) -> str:
        """Determine the verdict from the trust score."""
        if score >= 70:
            return "safe"
        elif score >= 40:
            return "suspicious"
        else:
            return "dangerous"

    def _key_factors(
        self,
        domain_age: ScoreComponent,
        ssl: ScoreComponent,
        url_structure: URLAnalysisResult,
        visual: ScoreComponent,
    ) -> list[str]:
        """Pick the subscores worth calling out. Mid-range scores say nothing."""
        factors: list[str] = []

        if domain_age.score >= 15:
            factors.append(f"✓ Established domain: {domain_age.reason}")
        elif domain_age.score < 5:
            factors.append(f"⚠ {domain_age.reason}")

        if ssl.score == ssl.max_score:
            factors.append("✓ Valid SSL certificate from a trusted authority")
        elif ssl.score == 0:
            factors.append(f"⚠ {ssl.reason}")

        if url_structure.score < 15:
            factors.append("⚠ URL contains suspicious patterns")

        if visual.score == visual.max_score:
            factors.append("✓ AI visual analysis found the site safe")
        elif visual.score == 0:
            factors.append("⚠ AI visual analysis flagged the site as dangerous")

        return factors

    def assess(
        self,
        url_structure: URLAnalysisResult,
        domain_age: ScoreComponent,
        ssl: ScoreComponent,
        hosting: ScoreComponent,
        visual: ScoreComponent,
        ai_reasons: tuple[str, ...] | list[str] = (),
        **extra: Any,
    ) -> TrustAssessment:
        """
        Combine the five subscores into a TrustAssessment.

        The numeric verdict is authoritative even when the AI said otherwise.
        Extra keyword arguments (url, hostname, ai_analysis, impersonation,
        technical_details) are copied onto the assessment.
        """
        total = url_structure.score + domain_age.score + ssl.score + hosting.score + visual.score
        trust_score = max(0, min(100, total))

        warnings = [*url_structure.issues, *url_structure.warnings, *ai_reasons]

        return TrustAssessment(
            result=self._calculate_verdict(trust_score),
            trust_score=trust_score,
            score_breakdown={
                "domain_age": domain_age,
                "ssl_certificate": ssl,
                "url_structure": url_structure,
                "hosting": hosting,
                "visual_analysis": visual,
            },
            key_factors=self._key_factors(domain_age, ssl, url_structure, visual),
            warnings=warnings,
            **extra,
        )

    async def _guarded(self, label: str, awaitable: Awaitable[T], fallback: T) -> T:
        """Await a collaborator call, turning any failure into its sentinel."""
        try:
            return await awaitable
        except Exception as e:
            logger.warning("%s failed: %s", label, e)
            return fallback

    async def _upload(self, shot: ScreenshotResult | None) -> str | None:
        if shot is None:
            return None
        try:
            return await self.collaborators.upload(shot)
        except Exception as e:
            logger.error("Failed to upload screenshot: %s", e)
            return None

    async def _classify(
        self,
        summary: dict[str, Any],
        shot: ScreenshotResult | None,
    ) -> AIVerdict | AIError:
        try:
            return await self.collaborators.classifier.classify(summary, shot)
        except Exception as e:
            logger.error("AI analysis failed: %s", e)
            return AIError(error="AI Analysis failed to execute")

    async def _reference_screenshot(self, legitimate_url: str) -> str | None:
        """Best-effort screenshot of the genuine site for side-by-side review.

        The URL is AI output and gets the same checks as caller input.
        """
        try:
            checked_url = await self.collaborators.url_guard(legitimate_url)
        except URLValidationError as e:
            logger.warning("Skipping reference screenshot of %s: %s", legitimate_url, e)
            return None

        shot = await self._guarded(
            "Reference screenshot", self.collaborators.screenshot(checked_url), None
        )
        return await self._upload(shot)

    async def analyze(self, url: str) -> TrustAssessment:
        """
        Perform the complete trust analysis on a URL.

        Gathers WHOIS, certificate, hosting and screenshot data concurrently,
        asks the AI oracle for a verdict, scores everything and assembles the
        assessment. Probe failures only lower their own subscore.
        """
        if self.collaborators is None:
            raise RuntimeError("TrustScorer.analyze() needs collaborators")

        target_url, hostname = normalize_target(url)
        logger.info("Analyzing URL: %s", target_url)

        c = self.collaborators
        whois, certificate, hosting, shot = await asyncio.gather(
            self._guarded("WHOIS lookup", c.whois(hostname), WhoisRecord(raw=WHOIS_ERROR)),
            self._guarded("SSL check", c.certificate(hostname), None),
            self._guarded("DNS lookup", c.hosting(hostname), None),
            self._guarded("Screenshot", c.screenshot(target_url), None),
        )

        screenshot_url = await self._upload(shot)

        technical_details = {
            "url": url,
            "hostname": hostname,
            "whois": whois.to_dict(),
            "ssl": certificate.to_dict() if certificate else None,
            "hosting": hosting.to_dict() if hosting else None,
            "screenshot_available": screenshot_url is not None,
            "screenshot_url": screenshot_url,
        }

        summary = dict(technical_details)
        summary["whois"] = {**technical_details["whois"], "raw": whois.raw[:MAX_PROMPT_WHOIS_CHARS]}
        ai = await self._classify(summary, shot)

        url_structure = self.url_analyzer.analyze(target_url, hostname)
        domain_age = self.domain_age.score(whois.creation_date)
        ssl = self.ssl.score(certificate)
        hosting_score = self.hosting.score(hosting)
        visual = self.visual.score(ai)

        for scorer, component in (
            (self.url_analyzer, url_structure),
            (self.domain_age, domain_age),
            (self.ssl, ssl),
            (self.hosting, hosting_score),
            (self.visual, visual),
        ):
            logger.debug(
                "%s for %s: %d/%d (%s)",
                scorer.name, hostname, component.score, component.max_score, component.reason,
            )

        impersonation = None
        if isinstance(ai, AIVerdict) and ai.has_impersonation_hint:
            impersonation = Impersonation(
                brand_name=ai.brand_name,
                legitimate_url=ai.legitimate_url,
                legitimate_screenshot_url=await self._reference_screenshot(ai.legitimate_url),
            )

        assessment = self.assess(
            url_structure,
            domain_age,
            ssl,
            hosting_score,
            visual,
            ai_reasons=ai.reasons if isinstance(ai, AIVerdict) else (),
            url=target_url,
            hostname=hostname,
            ai_analysis=ai,
            impersonation=impersonation,
            technical_details=technical_details,
        )
        logger.info(
            "Analysis of %s complete: %s (%d/100)",
            hostname, assessment.result, assessment.trust_score,
        )
        return assessment
