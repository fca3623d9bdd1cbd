from __future__ import annotations

import time
from typing import Callable, Optional

from .models import LatencyPool, LocationRecord, MeasurementResult, StatsSummary


def assemble(
    pool: LatencyPool,
    stats: StatsSummary,
    location: Optional[LocationRecord] = None,
    *,
    clock: Callable[[], float] = time.time,
) -> MeasurementResult:
    """Merge the scheduler counts, statistics and location into one timestamped result."""
    return MeasurementResult(
        timestamp=int(clock()),
        stats=stats,
        non_responsive_nodes=pool.non_responsive,
        total_hosts=pool.total_hosts,
        pings_per_host=stats.pings_per_host,
        timeout_secs=stats.timeout_secs,
        location=location,
    )
