"""TLS certificate probe."""

import asyncio
import logging
import socket
import ssl
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any

from models import CertificateRecord

logger = logging.getLogger(__name__)

# Shared thread pool for blocking SSL checks
_ssl_executor = ThreadPoolExecutor(max_workers=10, thread_name_prefix="ssl")

# getpeercert() attribute names -> the short RDN keys used in CertificateRecord
RDN_SHORT_NAMES = {
    "commonName": "CN",
    "organizationName": "O",
    "organizationalUnitName": "OU",
    "countryName": "C",
    "stateOrProvinceName": "ST",
    "localityName": "L",
}


def _parse_cert_date(date_str: str) -> datetime:
    """Parse certificate date string to datetime."""
    # SSL cert dates are in format: 'Mon DD HH:MM:SS YYYY GMT'
    return datetime.strptime(date_str, '%b %d %H:%M:%S %Y %Z').replace(tzinfo=timezone.utc)


def _flatten_name(rdns: Any) -> dict[str, str]:
    name: dict[str, str] = {}
    for rdn in rdns or ():
        for key, value in rdn:
            name[RDN_SHORT_NAMES.get(key, key)] = value
    return name


def record_from_peercert(cert: dict[str, Any], now: datetime | None = None) -> CertificateRecord:
    """Build a CertificateRecord from ``SSLSocket.getpeercert()`` output."""
    now = now or datetime.now(timezone.utc)
    not_before = _parse_cert_date(cert["notBefore"])
    not_after = _parse_cert_date(cert["notAfter"])

    return CertificateRecord(
        valid=not_before <= now <= not_after,
        subject=_flatten_name(cert.get("subject")),
        issuer=_flatten_name(cert.get("issuer")),
        valid_from=cert["notBefore"],
        valid_to=cert["notAfter"],
        days_remaining=(not_after - now).days,
    )


class CertificateProbe:
    """Fetches the certificate a host serves on port 443. Never raises."""

    def __init__(self, timeout: float = 5.0, port: int = 443):
        self.timeout = timeout
        self.port = port

    def _fetch_certificate(self, hostname: str) -> CertificateRecord | None:
        """Fetch certificate synchronously (run in executor)."""
        context = ssl.create_default_context()
        try:
            with socket.create_connection((hostname, self.port), timeout=self.timeout) as sock:
                with context.wrap_socket(sock, server_hostname=hostname) as ssock:
                    cert = ssock.getpeercert()
        except ssl.SSLCertVerificationError as e:
            # A certificate exists but does not chain, match or has expired
            logger.info("Certificate for %s failed verification: %s", hostname, e.verify_message)
            return CertificateRecord(valid=False)

        if not cert:
            return None
        return record_from_peercert(cert)

    async def __call__(self, hostname: str) -> CertificateRecord | None:
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(_ssl_executor, self._fetch_certificate, hostname),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("SSL check for %s timed out", hostname)
        except Exception as e:
            logger.warning("SSL check for %s failed: %s", hostname, e)
        return None
