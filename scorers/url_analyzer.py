"""URL structure scoring module."""

import re

from .base import BaseScorer, URLAnalysisResult
from .tables import DEFAULT_TABLES, ScoringTables


IPV4_PATTERN = re.compile(r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}', re.ASCII)
DIGIT_PATTERN = re.compile(r'\d', re.ASCII)


class URLAnalyzerScorer(BaseScorer):
    """
    Score based on the structure of the hostname.

    Starts from the ceiling and subtracts a penalty for every signal found:
    - Suspicious TLD
    - Brand name outside the brand's own domain (typosquatting)
    - Phishing keywords
    - Excessive subdomains
    - Suspicious character runs
    - IP address instead of a domain name
    - Very long hostname
    - Many digits
    """

    def __init__(self, tables: ScoringTables = DEFAULT_TABLES):
        self.tables = tables

    @property
    def name(self) -> str:
        return "URL Structure"

    @property
    def max_score(self) -> int:
        return 20

    def _extract_tld(self, hostname: str) -> str:
        """Return everything from the last dot, or the whole hostname."""
        index = hostname.rfind('.')
        return hostname[index:] if index >= 0 else hostname

    def _find_impersonated_brand(self, hostname: str) -> tuple[str, str] | None:
        """Return the first (brand, official_url) the hostname borrows, if any."""
        hostname_lower = hostname.lower()
        domain_parts = hostname_lower.replace('.', '')
        for brand, official_url in self.tables.brands.items():
            if brand not in domain_parts or f"{brand}.com" in hostname_lower:
                continue
            if domain_parts != brand:
                return brand, official_url
        return None

    def _find_suspicious_keywords(self, hostname: str) -> list[str]:
        """Find suspicious keywords in the hostname, in table order."""
        hostname_lower = hostname.lower()
        return [kw for kw in self.tables.suspicious_keywords if kw in hostname_lower]

    def _is_ip_address(self, hostname: str) -> bool:
        return IPV4_PATTERN.fullmatch(hostname) is not None

    def analyze(self, url: str, hostname: str) -> URLAnalysisResult:
        """
        Analyze the structure of a URL's hostname.

        Args:
            url: The full URL being checked
            hostname: Hostname extracted from the URL

        Returns:
            URLAnalysisResult with a score from 0-20
        """
        score = self.max_score
        issues: list[str] = []
        warnings: list[str] = []
        impersonated_brand = None
        legitimate_url = None

        # 1. Suspicious TLD
        tld = self._extract_tld(hostname)
        if tld.lower() in self.tables.suspicious_tlds:
            score -= 8
            issues.append(f"Suspicious TLD: {tld} (commonly used in phishing)")

        # 2. Typosquatting; first matching brand wins
        match = self._find_impersonated_brand(hostname)
        if match is not None:
            impersonated_brand, legitimate_url = match
            score -= 10
            issues.append(
                f'Potential brand impersonation: contains "{impersonated_brand}" but not official domain'
            )

        # 3. Suspicious keywords
        keywords = self._find_suspicious_keywords(hostname)
        for keyword in keywords:
            warnings.append(f'Domain contains suspicious keyword: "{keyword}"')
        if keywords:
            score -= min(len(keywords) * 3, 10)

        # 4. Excessive subdomains (e.g. login.secure.paypal.verify.com)
        subdomain_count = len(hostname.split('.')) - 2
        if subdomain_count > 2:
            score -= 5
            warnings.append(f"Excessive subdomains ({subdomain_count}) - potential obfuscation")

        # 5. Suspicious character runs
        if '--' in hostname or '..' in hostname:
            score -= 5
            issues.append("Domain contains suspicious character patterns")

        # 6. IP address instead of domain
        if self._is_ip_address(hostname):
            score -= 15
            issues.append("Using IP address instead of domain name (highly suspicious)")

        # 7. Very long hostname
        if len(hostname) > 40:
            score -= 3
            warnings.append("Unusually long domain name")

        # 8. Many digits
        if len(DIGIT_PATTERN.findall(hostname)) > 3:
            score -= 2
            warnings.append("Domain contains many numbers (potentially suspicious)")

        score = max(0, score)
        if issues:
            reason = f"{len(issues)} issue(s) and {len(warnings)} warning(s) found in URL structure"
        elif warnings:
            reason = f"{len(warnings)} warning(s) found in URL structure"
        else:
            reason = "No suspicious URL patterns detected"

        return URLAnalysisResult(
            score=score,
            max_score=self.max_score,
            reason=reason,
            issues=tuple(issues),
            warnings=tuple(warnings),
            impersonated_brand=impersonated_brand,
            legitimate_url=legitimate_url,
        )
