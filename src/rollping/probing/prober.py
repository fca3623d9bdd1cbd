"""Single ICMP echo probes.

A probe opens its own ICMP socket, sends one echo request and waits for the
matching reply. Every fault that can happen along the way is converted into
a failed `ProbeOutcome`; nothing is raised to the caller.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from icmplib import (
    AsyncSocket,
    ICMPError,
    ICMPLibError,
    ICMPRequest,
    ICMPv4Socket,
    ICMPv6Socket,
    TimeoutExceeded,
)
from icmplib.utils import is_ipv6_address, unique_identifier

from ..constants import DEFAULT_PAYLOAD_SIZE, MICROSECONDS_PER_SECOND
from ..exceptions import ProbeCancelled
from ..models import FailureReason, ProbeOutcome
from .dns import HostResolver

T = TypeVar("T")


class Prober:
    """Sends one ICMP echo request per call and times the reply."""

    def __init__(
        self,
        *,
        privileged: bool = False,
        payload_size: int = DEFAULT_PAYLOAD_SIZE,
        resolver: Optional[HostResolver] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.privileged = privileged
        self.payload_size = payload_size
        self.resolver = resolver or HostResolver()
        self.cancel_event = cancel_event

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    async def probe(self, host: str, timeout: float, sequence: int = 0) -> ProbeOutcome:
        """
        Send exactly one echo request to ``host`` and wait up to ``timeout``.

        Args:
            host: An IPv4/IPv6 literal or a resolvable name.
            timeout: Seconds to wait in total, name lookup included.
            sequence: ICMP sequence number of the request.

        Returns:
            A successful outcome with the round-trip time in microseconds, or
            a failed outcome tagged timeout, unreachable, error or cancelled.
        """
        if self.cancelled:
            return ProbeOutcome.failure(FailureReason.CANCELLED)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        try:
            address = await self._until_cancelled(self.resolver.resolve(host, timeout))
        except ProbeCancelled:
            return ProbeOutcome.failure(FailureReason.CANCELLED)
        if address is None:
            return ProbeOutcome.failure(FailureReason.ERROR, f"cannot resolve {host}")

        remaining = deadline - loop.time()
        if remaining <= 0:
            return ProbeOutcome.failure(FailureReason.TIMEOUT, f"no reply within {timeout}s")

        socket_cls = ICMPv6Socket if is_ipv6_address(address) else ICMPv4Socket
        request = ICMPRequest(
            destination=address,
            id=unique_identifier(),
            sequence=sequence,
            payload_size=self.payload_size,
        )
        try:
            with AsyncSocket(socket_cls(privileged=self.privileged)) as sock:
                sock.send(request)
                reply = await self._until_cancelled(sock.receive(request, remaining))
                reply.raise_for_status()
        except TimeoutExceeded:
            return ProbeOutcome.failure(FailureReason.TIMEOUT, f"no reply within {timeout}s")
        except ICMPError as exc:
            return ProbeOutcome.failure(FailureReason.UNREACHABLE, str(exc))
        except ProbeCancelled:
            logging.debug("Probe to %s cancelled", address)
            return ProbeOutcome.failure(FailureReason.CANCELLED)
        except (ICMPLibError, OSError) as exc:
            return ProbeOutcome.failure(FailureReason.ERROR, str(exc))

        rtt = (reply.time - request.time) * MICROSECONDS_PER_SECOND
        return ProbeOutcome.success(rtt)

    async def _until_cancelled(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable``, raising ProbeCancelled if the run is cancelled first."""
        if self.cancel_event is None:
            return await awaitable

        work = asyncio.ensure_future(awaitable)
        cancelled = asyncio.ensure_future(self.cancel_event.wait())
        done, pending = await asyncio.wait(
            {work, cancelled}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        if work in done:
            return work.result()
        raise ProbeCancelled()
