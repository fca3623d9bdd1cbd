"""Serialization of a `MeasurementResult` to one line of JSON."""
from __future__ import annotations

import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

from .models import MeasurementResult

LATENCY_FIELDS = ("avg", "median", "p95", "p99", "max")


def round_microseconds(value: float) -> int:
    """Round a microsecond value to the nearest integer, halves away from zero."""
    return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def result_to_dict(result: MeasurementResult) -> Dict[str, Any]:
    """
    Render a result with the external field names.

    The ``*_microsecs`` fields are omitted together when no probe succeeded,
    and ``location`` is omitted when it was not requested or not resolved.
    """
    data: Dict[str, Any] = {"timestamp": result.timestamp}
    if result.stats.has_latency:
        for name in LATENCY_FIELDS:
            value: Optional[float] = getattr(result.stats, name)
            data[f"{name}_microsecs"] = round_microseconds(value)
    data.update(
        non_responsive_nodes=result.non_responsive_nodes,
        total_hosts=result.total_hosts,
        pings_per_host=result.pings_per_host,
        timeout_secs=float(result.timeout_secs),
    )
    if result.location is not None:
        data["location"] = result.location.to_dict()
    return data


def render_json(result: MeasurementResult) -> str:
    """Return the result as a compact single-line JSON object."""
    return json.dumps(result_to_dict(result), separators=(",", ":"))
