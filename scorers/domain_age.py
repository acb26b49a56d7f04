"""Domain age scoring module using WHOIS data."""

from datetime import datetime, timezone

from .base import BaseScorer, ScoreComponent


# Layouts seen in WHOIS "Creation Date" lines besides ISO-8601
WHOIS_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%d-%b-%Y",
    "%Y.%m.%d",
    "%Y/%m/%d",
    "%d.%m.%Y",
)


def parse_whois_date(value: str | None) -> datetime | None:
    """Parse a loosely formatted WHOIS date; naive results are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    parsed = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in WHOIS_DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class DomainAgeScorer(BaseScorer):
    """
    Score based on domain age.

    Older domains are generally more trustworthy.
    - Domains < 30 days: 0
    - Domains < 6 months: 5
    - Domains < 12 months: 10
    - Domains < 2 years: 15
    - Domains >= 2 years: 20

    Months are days / 30 and years are days / 365.
    """

    @property
    def name(self) -> str:
        return "Domain Age"

    @property
    def max_score(self) -> int:
        return 20

    def score(self, creation_date: str | None, now: datetime | None = None) -> ScoreComponent:
        created = parse_whois_date(creation_date)
        if created is None:
            return self._create_result(0, "Domain age unknown")

        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        age_days = (now - created).days
        age_months = age_days / 30
        age_years = age_days / 365

        if age_days < 30:
            return self._create_result(0, f"Domain is very new ({age_days} days old) - HIGH RISK")
        elif age_months < 6:
            return self._create_result(5, f"Domain is {int(age_months)} months old - relatively new")
        elif age_months < 12:
            return self._create_result(10, f"Domain is {int(age_months)} months old")
        elif age_years < 2:
            return self._create_result(15, f"Domain is {int(age_years)} year(s) old")
        else:
            return self._create_result(20, f"Domain is {int(age_years)} years old - well established")
