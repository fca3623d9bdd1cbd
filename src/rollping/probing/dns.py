from __future__ import annotations

import asyncio
import ipaddress
import logging
from typing import Optional

from icmplib import ICMPLibError
from icmplib.utils import async_resolve


def is_ip_address(host: str) -> bool:
    """Check if the given host is a valid IP address."""
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        return False


class HostResolver:
    """A utility class for asynchronously resolving hostnames.

    Both answers and failures are cached for the lifetime of the resolver,
    so a name that cannot be resolved costs at most one lookup per run.
    """

    def __init__(self):
        self.dns_cache: dict[str, Optional[str]] = {}

    async def resolve(self, host: str, timeout: Optional[float] = None) -> Optional[str]:
        """Resolve a hostname to an IP address, with caching. Returns None on failure."""
        if host in self.dns_cache:
            return self.dns_cache[host]
        if is_ip_address(host):
            return host

        try:
            addresses = await asyncio.wait_for(async_resolve(host), timeout)
        except asyncio.TimeoutError:
            logging.debug("DNS lookup for %s timed out after %ss", host, timeout)
            addresses = None
        except (ICMPLibError, OSError) as exc:
            logging.debug("DNS lookup failed for %s: %s", host, exc)
            addresses = None

        address = addresses[0] if addresses else None
        self.dns_cache[host] = address
        return address
