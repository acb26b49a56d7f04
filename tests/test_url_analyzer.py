"""Tests for URL structure analysis."""

import pytest

from scorers import ScoringTables, URLAnalyzerScorer


@pytest.fixture
def analyzer():
    return URLAnalyzerScorer()


def analyze(analyzer, hostname):
    return analyzer.analyze(f"https://{hostname}/", hostname)


class TestURLAnalyzer:
    """Test URL structure scoring."""

    def test_clean_domain_keeps_full_score(self, analyzer):
        result = analyze(analyzer, "www.google.com")
        assert result.score == 20
        assert result.max_score == 20
        assert result.issues == ()
        assert result.warnings == ()
        assert result.impersonated_brand is None
        assert result.legitimate_url is None

    def test_brand_impersonation_on_suspicious_tld(self, analyzer):
        result = analyze(analyzer, "secure-paypal-login.tk")
        assert result.score == 0
        assert result.impersonated_brand == "paypal"
        assert result.legitimate_url == "https://www.paypal.com"
        assert result.issues == (
            "Suspicious TLD: .tk (commonly used in phishing)",
            'Potential brand impersonation: contains "paypal" but not official domain',
        )
        # Keyword warnings follow keyword table order, not hostname order
        assert result.warnings == (
            'Domain contains suspicious keyword: "login"',
            'Domain contains suspicious keyword: "secure"',
        )

    def test_ip_address_hostname(self, analyzer):
        result = analyze(analyzer, "192.168.1.1")
        assert result.score <= 5
        # -15 for the IP literal, -2 for the digits
        assert result.score == 3
        assert "Using IP address instead of domain name (highly suspicious)" in result.issues
        assert "Domain contains many numbers (potentially suspicious)" in result.warnings

    def test_first_matching_brand_wins(self, analyzer):
        result = analyze(analyzer, "apple-paypal.net")
        assert result.impersonated_brand == "apple"
        assert result.legitimate_url == "https://www.apple.com"
        assert len([i for i in result.issues if "brand impersonation" in i]) == 1
        assert result.score == 10

    def test_official_dot_com_domain_is_not_impersonation(self, analyzer):
        result = analyze(analyzer, "mail.google.com")
        assert result.impersonated_brand is None
        assert result.score == 20

    def test_hostname_equal_to_brand_is_not_flagged(self, analyzer):
        result = analyze(analyzer, "paypal")
        assert result.impersonated_brand is None
        assert result.score == 20

    def test_keyword_penalty_is_capped(self, analyzer):
        result = analyze(analyzer, "login-verify-account-update.com")
        assert len(result.warnings) == 4
        assert result.score == 10

    def test_excessive_subdomains(self, analyzer):
        result = analyze(analyzer, "a.b.c.example.com")
        assert result.score == 15
        assert result.warnings == ("Excessive subdomains (3) - potential obfuscation",)

    def test_two_subdomains_are_fine(self, analyzer):
        result = analyze(analyzer, "a.b.example.com")
        assert result.score == 20

    def test_double_hyphen(self, analyzer):
        result = analyze(analyzer, "my--shop.com")
        assert result.score == 15
        assert result.issues == ("Domain contains suspicious character patterns",)

    def test_long_hostname(self, analyzer):
        hostname = "a" * 38 + ".com"
        result = analyze(analyzer, hostname)
        assert result.score == 17
        assert result.warnings == ("Unusually long domain name",)

    def test_many_digits(self, analyzer):
        result = analyze(analyzer, "shop12345.com")
        assert result.score == 18

    def test_three_digits_are_fine(self, analyzer):
        result = analyze(analyzer, "shop123.com")
        assert result.score == 20

    def test_tld_match_is_case_insensitive(self, analyzer):
        result = analyze(analyzer, "EXAMPLE.TK")
        assert result.score == 12
        assert result.issues == ("Suspicious TLD: .TK (commonly used in phishing)",)

    def test_analysis_is_idempotent(self, analyzer):
        first = analyze(analyzer, "verify-netflix-account.xyz")
        second = analyze(analyzer, "verify-netflix-account.xyz")
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_optional_fields_omitted_from_dict(self, analyzer):
        data = analyze(analyzer, "example.com").to_dict()
        assert "impersonated_brand" not in data
        assert "legitimate_url" not in data
        assert data["issues"] == []

    def test_injected_tables(self):
        analyzer = URLAnalyzerScorer(ScoringTables(brands={"acme": "https://acme.com"}))
        result = analyze(analyzer, "acme-portal.net")
        assert result.impersonated_brand == "acme"
        assert result.legitimate_url == "https://acme.com"

    @pytest.mark.parametrize("hostname", [
        "x--y..z.tk",
        "login-signin-verify-account-update-secure-paypal.000000.ga",
        "1.2.3.4",
        "a.b.c.d.e.f.g.h.click",
    ])
    def test_score_stays_in_bounds(self, analyzer, hostname):
        result = analyze(analyzer, hostname)
        assert 0 <= result.score <= 20
