from __future__ import annotations

import asyncio
import ipaddress
import logging
from typing import Optional, Sequence

import aiohttp

from ..constants import PUBLIC_IP_SERVICES
from ..exceptions import NetworkError
from .resolver import IPAddress


async def get_public_ip(
    services: Sequence[str] = PUBLIC_IP_SERVICES,
    *,
    timeout: float = 5.0,
    session: Optional[aiohttp.ClientSession] = None,
) -> IPAddress:
    """
    Get the public IP address of the current machine.

    Services are tried in order; the first whose trimmed response body is a
    valid IPv4 or IPv6 address wins.

    Raises:
        NetworkError: If no service returned a usable address.
    """
    logging.debug("Detecting public IP address...")
    own_session = session is None
    session = session or aiohttp.ClientSession()
    try:
        for service in services:
            try:
                async with session.get(
                    service, timeout=aiohttp.ClientTimeout(total=timeout)
                ) as resp:
                    if resp.status != 200:
                        logging.debug("Failed to get IP from %s: HTTP %d", service, resp.status)
                        continue
                    text = await resp.text()
            except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as exc:
                logging.debug("Failed to get IP from %s: %s", service, exc)
                continue
            try:
                ip = ipaddress.ip_address(text.strip())
            except ValueError:
                logging.debug("Ignoring non-IP response from %s: %r", service, text[:64])
                continue
            logging.debug("Detected public IP: %s (from %s)", ip, service)
            return ip
    finally:
        if own_session:
            await session.close()

    raise NetworkError("Failed to detect public IP address from any service")
