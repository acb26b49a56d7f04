"""Scoring modules for website trust analysis."""

from .base import ScoreComponent, URLAnalysisResult
from .domain_age import DomainAgeScorer
from .ssl_checker import SSLScorer
from .url_analyzer import URLAnalyzerScorer
from .hosting_scorer import HostingScorer
from .visual import VisualScorer
from .tables import DEFAULT_TABLES, ScoringTables
from .aggregator import Collaborators, TrustAssessment, TrustScorer

__all__ = [
    "ScoreComponent",
    "URLAnalysisResult",
    "DomainAgeScorer",
    "SSLScorer",
    "URLAnalyzerScorer",
    "HostingScorer",
    "VisualScorer",
    "DEFAULT_TABLES",
    "ScoringTables",
    "Collaborators",
    "TrustAssessment",
    "TrustScorer",
]
