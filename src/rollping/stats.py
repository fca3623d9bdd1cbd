"""Summary statistics over the pooled round-trip times of a run.

Percentiles use the nearest-rank method: for ``n`` sorted samples the
``p``-th percentile is the sample at 1-indexed rank ``ceil(p * n / 100)``.
No interpolation is performed, so every reported percentile is an observed
latency.
"""
from __future__ import annotations

import statistics
from typing import Iterable, Sequence

from .models import StatsSummary


def percentile(sorted_values: Sequence[float], percent: int) -> float:
    """Return the nearest-rank ``percent``-th percentile of ``sorted_values``."""
    if not sorted_values:
        raise ValueError("percentile of an empty sequence")
    if not 0 < percent <= 100:
        raise ValueError(f"percent must be in 1..100, got {percent}")
    n = len(sorted_values)
    # ceil(percent * n / 100) in integer arithmetic
    rank = -(-percent * n // 100)
    return sorted_values[min(max(rank, 1), n) - 1]


def summarize(
    latencies: Iterable[float],
    *,
    total_hosts: int = 0,
    pings_per_host: int = 0,
    timeout_secs: float = 0.0,
) -> StatsSummary:
    """
    Compute avg, median, p95, p99 and max over ``latencies``.

    An empty input is a valid outcome (every probe failed): the returned
    summary then has all five latency fields set to ``None``.

    Args:
        latencies: Round-trip times in microseconds, in any order.
        total_hosts: Number of hosts probed, carried into the summary.
        pings_per_host: Probes sent per host, carried into the summary.
        timeout_secs: Per-probe timeout, carried into the summary.

    Returns:
        A frozen `StatsSummary`.
    """
    ordered = sorted(latencies)
    if not ordered:
        return StatsSummary(
            total_hosts=total_hosts,
            pings_per_host=pings_per_host,
            timeout_secs=timeout_secs,
        )

    return StatsSummary(
        avg=statistics.fmean(ordered),
        median=statistics.median(ordered),
        p95=percentile(ordered, 95),
        p99=percentile(ordered, 99),
        max=ordered[-1],
        sample_count=len(ordered),
        total_hosts=total_hosts,
        pings_per_host=pings_per_host,
        timeout_secs=timeout_secs,
    )
