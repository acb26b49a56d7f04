"""Maps the AI visual verdict onto a subscore."""

from models import AIError, AIVerdict

from .base import BaseScorer, ScoreComponent


VERDICT_SCORES = {
    "safe": 30,
    "suspicious": 15,
    "dangerous": 0,
}


class VisualScorer(BaseScorer):
    """Score from the AI's safe/suspicious/dangerous verdict.

    An unavailable oracle or an unrecognised verdict scores the neutral
    midpoint.
    """

    @property
    def name(self) -> str:
        return "Visual Analysis"

    @property
    def max_score(self) -> int:
        return 30

    def score(self, verdict: AIVerdict | AIError | None) -> ScoreComponent:
        if not isinstance(verdict, AIVerdict):
            return self._create_result(15, "AI analysis unavailable")

        result = verdict.result.strip().lower()
        if result not in VERDICT_SCORES:
            return self._create_result(15, "AI analysis unavailable")
        return self._create_result(VERDICT_SCORES[result], f"AI visual analysis: {result}")
