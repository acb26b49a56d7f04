"""DNS / hosting probe."""

import asyncio
import logging
import socket
from concurrent.futures import ThreadPoolExecutor

from models import HostingRecord

logger = logging.getLogger(__name__)

# Shared thread pool for blocking DNS calls
_dns_executor = ThreadPoolExecutor(max_workers=10, thread_name_prefix="dns")


class HostingProbe:
    """Resolves a hostname and reverse-resolves its first address. Never raises."""

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    def _resolve_dns(self, hostname: str) -> str:
        """Resolve DNS to the first IP address."""
        result = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
        return str(result[0][4][0])

    def _reverse_dns(self, ip: str) -> str:
        """Perform reverse DNS lookup; empty string when none is configured."""
        try:
            hostname, _, _ = socket.gethostbyaddr(ip)
            return hostname
        except (socket.herror, socket.gaierror, OSError):
            return ""

    def _lookup(self, hostname: str) -> HostingRecord:
        ip = self._resolve_dns(hostname)
        return HostingRecord(ip=ip, reverse=self._reverse_dns(ip))

    async def __call__(self, hostname: str) -> HostingRecord | None:
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(_dns_executor, self._lookup, hostname),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("DNS lookup for %s timed out", hostname)
        except Exception as e:
            logger.warning("DNS lookup for %s failed: %s", hostname, e)
        return None
