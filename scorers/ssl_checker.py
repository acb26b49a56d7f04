"""SSL Certificate scoring module."""

from models import CertificateRecord

from .base import BaseScorer, ScoreComponent
from .tables import DEFAULT_TABLES, ScoringTables


class SSLScorer(BaseScorer):
    """
    Score based on the TLS certificate served by the host.

    - No certificate, or an invalid one: 0
    - Valid certificate from a trusted CA: 20
    - Valid certificate from any other CA: 10

    The trusted CA check is a plain substring test on the issuer's
    organization (or common name when no organization is given).
    """

    def __init__(self, tables: ScoringTables = DEFAULT_TABLES):
        self.tables = tables

    @property
    def name(self) -> str:
        return "SSL Certificate"

    @property
    def max_score(self) -> int:
        return 20

    def score(self, certificate: CertificateRecord | None) -> ScoreComponent:
        if certificate is None:
            return self._create_result(0, "No SSL certificate found")

        if not certificate.valid:
            return self._create_result(0, "SSL certificate is invalid or expired")

        issuer_name = certificate.issuer_name
        if any(issuer in issuer_name for issuer in self.tables.trusted_issuers):
            return self._create_result(20, f"Valid SSL from trusted CA: {issuer_name}")
        return self._create_result(10, f"Valid SSL but from unknown CA: {issuer_name}")
