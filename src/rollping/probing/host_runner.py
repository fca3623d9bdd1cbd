from __future__ import annotations

import asyncio
import logging
from typing import List

from ..exceptions import ConfigError
from ..models import HostResult, ProbeOutcome
from .prober import Prober


class HostRunner:
    """Sends a fixed number of probes to one host and collects the outcomes."""

    def __init__(self, prober: Prober, *, interval: float = 0.0) -> None:
        self.prober = prober
        self.interval = interval

    async def run(self, host: str, count: int, timeout: float) -> HostResult:
        """
        Probe ``host`` ``count`` times, sequentially, with the same timeout.

        Every attempt is made regardless of earlier failures, so the success
        ratio of a host is always measured over ``count`` probes.

        Raises:
            ConfigError: If ``count`` is not a positive integer.
        """
        if count <= 0:
            raise ConfigError(f"probe count must be positive, got {count}")

        logging.debug("Pinging host: %s (%d times)", host, count)
        outcomes: List[ProbeOutcome] = []
        for sequence in range(count):
            if sequence > 0 and self.interval > 0:
                await asyncio.sleep(self.interval)
            outcome = await self.prober.probe(host, timeout, sequence=sequence)
            if outcome.ok:
                logging.debug(
                    "Host %s ping #%d: %.2fms", host, sequence + 1, outcome.latency / 1000
                )
            else:
                logging.debug(
                    "Host %s ping #%d failed (%s): %s",
                    host,
                    sequence + 1,
                    outcome.reason.value,
                    outcome.detail,
                )
            outcomes.append(outcome)

        result = HostResult.from_outcomes(host, outcomes)
        if result.responsive:
            logging.info(
                "Host %s best time: %.2fms (%d/%d successful)",
                host,
                result.best / 1000,
                len(result.latencies),
                count,
            )
        else:
            logging.warning("Host %s failed all pings", host)
        return result
