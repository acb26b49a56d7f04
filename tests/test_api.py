"""Tests for the HTTP surface."""

import socket
import time
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

import main
from scorers import TrustScorer
from security import RateLimiter, URLValidationError, validate_url, validate_url_bounded

CHECK_URL = "/v1/api/url/check"


def resolve_to(ip):
    def fake_getaddrinfo(host, port, *args, **kwargs):
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (ip, 0))]
    return fake_getaddrinfo


@pytest.fixture
def public_dns(monkeypatch):
    monkeypatch.setattr("security.socket.getaddrinfo", resolve_to("93.184.216.34"))


@pytest.fixture
def client(monkeypatch, make_collaborators, public_dns):
    monkeypatch.setattr(main, "scorer", TrustScorer(make_collaborators()))
    # A fresh limiter per test keeps the suite independent of ordering
    monkeypatch.setattr(main.rate_limiter, "minute_requests", RateLimiter().minute_requests)
    monkeypatch.setattr(main.rate_limiter, "hour_requests", RateLimiter().hour_requests)
    return TestClient(main.app)


class TestCheckEndpoint:

    def test_successful_analysis(self, client):
        response = client.post(CHECK_URL, json={"url": "https://www.google.com"})
        assert response.status_code == 200
        body = response.json()
        assert body["statusCode"] == 200
        assert body["success"] is True
        assert body["message"] == "Website analysis completed"
        data = body["data"]
        assert data["result"] == "safe"
        assert data["trust_score"] == 100
        assert data["hostname"] == "www.google.com"
        assert set(data["score_breakdown"]) == {
            "domain_age", "ssl_certificate", "url_structure", "hosting", "visual_analysis",
        }
        assert data["ai_analysis"]["result"] == "safe"

    def test_scheme_is_added(self, client):
        response = client.post(CHECK_URL, json={"url": "www.google.com"})
        assert response.status_code == 200
        assert response.json()["data"]["url"] == "https://www.google.com"

    def test_missing_url(self, client):
        response = client.post(CHECK_URL, json={})
        assert response.status_code == 400
        body = response.json()
        assert body == {"statusCode": 400, "data": None, "message": "URL is required", "success": False}

    def test_blank_url(self, client):
        response = client.post(CHECK_URL, json={"url": "   "})
        assert response.status_code == 400
        assert response.json()["message"] == "URL is required"

    def test_hostname_without_dot(self, client):
        response = client.post(CHECK_URL, json={"url": "intranet"})
        assert response.status_code == 400
        assert response.json()["message"] == "Please provide a valid URL"

    def test_javascript_url(self, client):
        response = client.post(CHECK_URL, json={"url": "javascript:alert(1)"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_loopback_is_rejected(self, client):
        response = client.post(CHECK_URL, json={"url": "http://127.0.0.1/admin"})
        assert response.status_code == 400
        assert response.json()["message"] == "Access to internal resources is not allowed"

    def test_name_resolving_to_private_ip(self, client, monkeypatch):
        monkeypatch.setattr("security.socket.getaddrinfo", resolve_to("10.0.0.5"))
        response = client.post(CHECK_URL, json={"url": "https://internal.example.com"})
        assert response.status_code == 400
        assert response.json()["message"] == "URL resolves to a private IP address"

    def test_non_json_body(self, client):
        response = client.post(CHECK_URL, content=b"not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_analysis_failure_is_generic_500(self, client, monkeypatch):
        class Exploding(TrustScorer):
            async def analyze(self, url):
                raise RuntimeError("secret internal detail")

        monkeypatch.setattr(main, "scorer", Exploding())
        response = client.post(CHECK_URL, json={"url": "https://example.com"})
        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Analysis failed. Please verify the URL and try again."
        assert "secret" not in response.text


class TestOtherRoutes:

    def test_health(self, client):
        response = client.get("/v1/api/health")
        assert response.status_code == 200
        assert response.json()["data"] == {"status": "healthy"}

    def test_security_headers(self, client):
        response = client.get("/v1/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "no-store" in response.headers["Cache-Control"]

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/v1/api/nope")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestRateLimit:

    def test_limit_returns_429_envelope(self, client, monkeypatch):
        monkeypatch.setattr(main.rate_limiter, "requests_per_minute", 2)
        for _ in range(2):
            assert client.get("/v1/api/health").status_code == 200
        response = client.get("/v1/api/health")
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert response.json()["statusCode"] == 429


class TestValidateUrl:

    def test_fragment_is_dropped(self, public_dns):
        assert validate_url("HTTPS://Example.com/path?q=1#frag") == "https://example.com/path?q=1"

    def test_private_ip_allowed_when_internal_enabled(self):
        assert validate_url("http://192.168.1.10", allow_internal=True) == "http://192.168.1.10"

    @pytest.mark.parametrize("url", [
        "ftp://example.com",
        "https://example.com/<script>",
        "https://exa\nmple.com",
        "https://" + "a" * 2050 + ".com",
    ])
    def test_rejected(self, url, public_dns):
        with pytest.raises(URLValidationError):
            validate_url(url)


def fake_request(host, headers=None):
    return SimpleNamespace(headers=headers or {}, client=SimpleNamespace(host=host))


class TestRateLimiter:

    def test_forwarded_header_ignored_by_default(self, client, monkeypatch):
        monkeypatch.setattr(main.rate_limiter, "trust_proxy_headers", False)
        monkeypatch.setattr(main.rate_limiter, "requests_per_minute", 1)

        first = client.get("/v1/api/health", headers={"X-Forwarded-For": "203.0.113.1"})
        second = client.get("/v1/api/health", headers={"X-Forwarded-For": "203.0.113.2"})

        assert first.status_code == 200
        assert second.status_code == 429
        assert list(main.rate_limiter.minute_requests) == ["testclient"]

    @pytest.mark.asyncio
    async def test_forwarded_header_used_behind_proxy(self):
        limiter = RateLimiter(requests_per_minute=1, trust_proxy_headers=True)
        proxy = "10.0.0.2"

        assert (await limiter.check_rate_limit(fake_request(proxy, {"X-Forwarded-For": "198.51.100.7, 10.0.0.2"})))[0]
        assert (await limiter.check_rate_limit(fake_request(proxy, {"X-Real-IP": "198.51.100.8"})))[0]
        allowed, message = await limiter.check_rate_limit(fake_request(proxy, {"X-Forwarded-For": "198.51.100.7"}))
        assert not allowed
        assert "per minute" in message

    @pytest.mark.asyncio
    async def test_idle_clients_are_forgotten(self):
        limiter = RateLimiter()
        long_ago = datetime.now() - timedelta(hours=2)
        for host in ("198.51.100.1", "198.51.100.2"):
            limiter.minute_requests[host] = [long_ago]
            limiter.hour_requests[host] = [long_ago]
        limiter._last_sweep = long_ago

        allowed, _ = await limiter.check_rate_limit(fake_request("198.51.100.3"))

        assert allowed
        assert set(limiter.minute_requests) == {"198.51.100.3"}
        assert set(limiter.hour_requests) == {"198.51.100.3"}

    @pytest.mark.asyncio
    async def test_returning_client_entry_is_rebuilt(self):
        limiter = RateLimiter()
        long_ago = datetime.now() - timedelta(hours=2)
        limiter.minute_requests["198.51.100.1"] = [long_ago]
        limiter.hour_requests["198.51.100.1"] = [long_ago]

        await limiter.check_rate_limit(fake_request("198.51.100.1"))

        assert len(limiter.minute_requests["198.51.100.1"]) == 1
        assert len(limiter.hour_requests["198.51.100.1"]) == 1


class TestBoundedValidation:

    @pytest.mark.asyncio
    async def test_slow_resolver_fails_validation(self, monkeypatch):
        def slow_getaddrinfo(*args, **kwargs):
            time.sleep(0.5)
            return resolve_to("93.184.216.34")(*args)

        monkeypatch.setattr("security.socket.getaddrinfo", slow_getaddrinfo)
        with pytest.raises(URLValidationError, match="Timed out"):
            await validate_url_bounded("https://slow.example.com", timeout=0.05)

    @pytest.mark.asyncio
    async def test_fast_resolver_passes(self, public_dns):
        assert await validate_url_bounded("example.com/a") == "https://example.com/a"

    def test_slow_resolver_is_a_400(self, client, monkeypatch):
        def slow_getaddrinfo(*args, **kwargs):
            time.sleep(0.5)
            return resolve_to("93.184.216.34")(*args)

        monkeypatch.setattr("security.socket.getaddrinfo", slow_getaddrinfo)
        monkeypatch.setattr(main.settings, "dns_timeout", 0.05)
        response = client.post(CHECK_URL, json={"url": "https://slow.example.com"})
        assert response.status_code == 400
        assert response.json()["message"] == "Timed out resolving the URL hostname"
