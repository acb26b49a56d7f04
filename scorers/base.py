"""Base class for all scorers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScoreComponent:
    """Result of a scoring operation."""

    score: int  # 0 (suspicious) to max_score (trustworthy)
    max_score: int
    reason: str

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "max_score": self.max_score,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class URLAnalysisResult(ScoreComponent):
    """URL structure score with the findings that produced it."""

    issues: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)
    impersonated_brand: str | None = None
    legitimate_url: str | None = None

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["issues"] = list(self.issues)
        data["warnings"] = list(self.warnings)
        # Only add optional properties if they have values
        if self.impersonated_brand:
            data["impersonated_brand"] = self.impersonated_brand
        if self.legitimate_url:
            data["legitimate_url"] = self.legitimate_url
        return data


class BaseScorer(ABC):
    """Abstract base class for all scoring modules."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this scorer."""
        pass

    @property
    @abstractmethod
    def max_score(self) -> int:
        """Return the ceiling of this scorer's subscore."""
        pass

    def _create_result(self, score: int, reason: str) -> ScoreComponent:
        """Helper to create a ScoreComponent."""
        return ScoreComponent(
            score=max(0, min(self.max_score, score)),  # Clamp between 0 and max_score
            max_score=self.max_score,
            reason=reason,
        )
