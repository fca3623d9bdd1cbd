"""Bounded fan-out of host runners across a host list.

The `Scheduler` starts one task per host but lets at most ``max_concurrency``
of them probe at once; the rest wait on a semaphore. Finished host results
are pushed onto a queue drained by a single collector task, which is the
only code that touches the `LatencyPool`.
"""
from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional, Sequence

from tqdm import tqdm

from ..exceptions import ConfigError
from ..models import FailureReason, HostResult, LatencyPool
from .host_runner import HostRunner


def validate_run(count: int, timeout: float, max_concurrency: int) -> None:
    """Reject run parameters that violate the caller contract."""
    if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
        raise ConfigError(f"probe count must be a positive integer, got {count!r}")
    if not timeout > 0:
        raise ConfigError(f"timeout must be positive, got {timeout!r}")
    if isinstance(max_concurrency, bool) or not isinstance(max_concurrency, int) or max_concurrency <= 0:
        raise ConfigError(f"max_concurrency must be a positive integer, got {max_concurrency!r}")


class Scheduler:
    """Runs a `HostRunner` over many hosts with a concurrency ceiling."""

    def __init__(
        self,
        runner: HostRunner,
        *,
        max_concurrency: int,
        best_only: bool = False,
        show_progress: bool = False,
    ) -> None:
        self.runner = runner
        self.max_concurrency = max_concurrency
        self.best_only = best_only
        self.show_progress = show_progress

    async def run_all(
        self,
        hosts: Sequence[str],
        count: int,
        timeout: float,
        max_concurrency: Optional[int] = None,
    ) -> LatencyPool:
        """
        Probe every host and pool the successful latencies.

        Args:
            hosts: Hosts to probe; duplicates are probed independently.
            count: Probes per host.
            timeout: Per-probe timeout in seconds.
            max_concurrency: Overrides the ceiling given at construction.

        Returns:
            A `LatencyPool` holding one merged `HostResult` per host.

        Raises:
            ConfigError: If any run parameter is invalid. Nothing is probed
                in that case.
        """
        limit = max_concurrency if max_concurrency is not None else self.max_concurrency
        validate_run(count, timeout, limit)

        pool = LatencyPool(total_hosts=len(hosts), best_only=self.best_only)
        if not hosts:
            return pool

        semaphore = asyncio.Semaphore(limit)
        results: asyncio.Queue[HostResult] = asyncio.Queue()

        async def worker(host: str) -> None:
            async with semaphore:
                try:
                    result = await self.runner.run(host, count, timeout)
                except ConfigError:
                    raise
                except Exception as exc:
                    logging.warning("Probing %s failed unexpectedly: %s", host, exc)
                    result = HostResult(host=host, failures=(FailureReason.ERROR,) * count)
            await results.put(result)

        async def collect(progress: tqdm) -> None:
            for _ in range(len(hosts)):
                pool.merge(await results.get())
                progress.update(1)

        with tqdm(
            total=len(hosts),
            desc="Probing hosts",
            unit="host",
            file=sys.stderr,
            disable=not self.show_progress,
        ) as progress:
            collector = asyncio.create_task(collect(progress))
            tasks = [asyncio.create_task(worker(host)) for host in hosts]
            try:
                await asyncio.gather(*tasks)
                await collector
            finally:
                for task in (*tasks, collector):
                    if not task.done():
                        task.cancel()
                await asyncio.gather(*tasks, collector, return_exceptions=True)

        logging.info(
            "Completed pinging %d hosts, %d non-responsive",
            pool.total_hosts,
            pool.non_responsive,
        )
        return pool
