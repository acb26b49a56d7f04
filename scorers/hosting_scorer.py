"""Hosting reputation scoring module."""

from models import HostingRecord

from .base import BaseScorer, ScoreComponent
from .tables import DEFAULT_TABLES, ScoringTables


class HostingScorer(BaseScorer):
    """
    Score based on who hosts the site, judged from reverse DNS.

    Missing hosting data is neutral (5), not a penalty.
    """

    def __init__(self, tables: ScoringTables = DEFAULT_TABLES):
        self.tables = tables

    @property
    def name(self) -> str:
        return "Hosting"

    @property
    def max_score(self) -> int:
        return 10

    def score(self, hosting: HostingRecord | None) -> ScoreComponent:
        if hosting is None or not hosting.ip:
            return self._create_result(5, "Hosting information unavailable")

        reverse = (hosting.reverse or "").lower()
        if any(provider in reverse for provider in self.tables.reputable_providers):
            return self._create_result(10, f"Hosted on reputable provider: {hosting.reverse}")
        return self._create_result(5, "Unknown hosting provider")
