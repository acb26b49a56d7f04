"""WHOIS probe."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any

import tldextract
import whois

from models import WhoisRecord

logger = logging.getLogger(__name__)

# Shared thread pool for blocking WHOIS calls
_whois_executor = ThreadPoolExecutor(max_workers=5, thread_name_prefix="whois")

WHOIS_ERROR = "Error fetching whois data"
WHOIS_TIMEOUT = "Whois request timed out"


def _first(value: Any) -> Any:
    """python-whois returns a list when the registry repeats a field."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _as_text(value: Any) -> str | None:
    value = _first(value)
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    text = str(value).strip()
    return text or None


def record_from_entry(entry: Any) -> WhoisRecord:
    """Convert a python-whois entry into a WhoisRecord."""
    if entry is None:
        return WhoisRecord(raw=WHOIS_ERROR)

    get = entry.get if isinstance(entry, dict) else lambda key: getattr(entry, key, None)
    raw = getattr(entry, "text", None) or ""

    return WhoisRecord(
        raw=raw,
        domain_name=_as_text(get("domain_name")),
        registrar=_as_text(get("registrar")),
        creation_date=_as_text(get("creation_date")),
        expiration_date=_as_text(get("expiration_date")),
    )


class WhoisLookup:
    """Looks up the registrable domain of a hostname. Never raises."""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    def _extract_domain(self, hostname: str) -> str:
        """Extract the registrable domain from a hostname."""
        extracted = tldextract.extract(hostname)
        if extracted.domain and extracted.suffix:
            return f"{extracted.domain}.{extracted.suffix}"
        return hostname

    async def __call__(self, hostname: str) -> WhoisRecord:
        domain = self._extract_domain(hostname)
        loop = asyncio.get_running_loop()
        try:
            entry = await asyncio.wait_for(
                loop.run_in_executor(_whois_executor, whois.whois, domain),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("WHOIS lookup for %s timed out after %.1fs", domain, self.timeout)
            return WhoisRecord(raw=WHOIS_TIMEOUT)
        except Exception as e:
            logger.warning("WHOIS lookup for %s failed: %s", domain, e)
            return WhoisRecord(raw=WHOIS_ERROR)

        return record_from_entry(entry)
