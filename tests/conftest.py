"""Shared fixtures: fake collaborators so no test touches the network."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from models import (
    AIError,
    AIVerdict,
    CertificateRecord,
    HostingRecord,
    ScreenshotResult,
    WhoisRecord,
)
from oracle import Classifier
from scorers import Collaborators


FIXED_NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeClassifier(Classifier):
    """Returns a canned verdict and remembers what it was shown."""

    def __init__(self, verdict: AIVerdict | AIError | Exception):
        self.verdict = verdict
        self.calls: list[tuple[dict[str, Any], ScreenshotResult | None]] = []

    async def classify(self, summary, image=None):
        self.calls.append((summary, image))
        if isinstance(self.verdict, Exception):
            raise self.verdict
        return self.verdict


class Recorder:
    """Async callable returning a fixed value (or raising) and logging its arguments."""

    def __init__(self, value: Any = None):
        self.value = value
        self.calls: list[Any] = []

    async def __call__(self, arg):
        self.calls.append(arg)
        if isinstance(self.value, Exception):
            raise self.value
        if callable(self.value):
            return self.value(arg)
        return self.value


def years_ago(years: int) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=365 * years)).isoformat()


@pytest.fixture
def screenshot() -> ScreenshotResult:
    return ScreenshotResult(mime="image/jpeg", data=b"\xff\xd8fake-jpeg")


@pytest.fixture
def make_collaborators(screenshot):
    """Build a Collaborators bundle of healthy fakes; override any field by keyword."""

    def _make(**overrides: Any) -> Collaborators:
        defaults: dict[str, Any] = {
            "whois": Recorder(WhoisRecord(
                raw="Domain Name: GOOGLE.COM",
                domain_name="GOOGLE.COM",
                registrar="MarkMonitor Inc.",
                creation_date=years_ago(10),
            )),
            "certificate": Recorder(CertificateRecord(
                valid=True,
                subject={"CN": "*.google.com"},
                issuer={"O": "Google Trust Services", "CN": "WR2"},
                valid_from="Jan  1 00:00:00 2026 GMT",
                valid_to="Mar 26 00:00:00 2026 GMT",
                days_remaining=84,
            )),
            "hosting": Recorder(HostingRecord(
                ip="142.250.74.46",
                reverse="lhr25s34-in-f14.1e100.googleusercontent.com",
            )),
            "screenshot": Recorder(screenshot),
            "upload": Recorder("https://res.cloudinary.com/demo/image/upload/screenshots/shot.jpg"),
            "classifier": FakeClassifier(AIVerdict(result="safe", reasons=("Official Google domain",))),
            "url_guard": Recorder(lambda url: url),
        }
        defaults.update(overrides)
        return Collaborators(**defaults)

    return _make
