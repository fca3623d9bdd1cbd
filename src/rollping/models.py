"""Data records passed between the probing, statistics and geolocation stages.

Latencies are carried as floating point microseconds everywhere inside the
package. Rounding to whole microseconds only happens when a result is
serialized (see :mod:`rollping.output`).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple


class FailureReason(str, Enum):
    """Why a single probe did not produce a round-trip time."""

    TIMEOUT = "timeout"
    UNREACHABLE = "unreachable"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ProbeOutcome:
    """
    Result of one ICMP echo exchange.

    Exactly one of ``latency`` and ``reason`` is set.

    Attributes:
        latency: Round-trip time in microseconds for a successful probe.
        reason: The failure category for an unsuccessful probe.
        detail: Free-form description of the failure, for logging.
    """

    latency: Optional[float] = None
    reason: Optional[FailureReason] = None
    detail: str = ""

    def __post_init__(self) -> None:
        if (self.latency is None) == (self.reason is None):
            raise ValueError("ProbeOutcome needs either a latency or a failure reason")

    @classmethod
    def success(cls, latency: float) -> "ProbeOutcome":
        return cls(latency=latency)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str = "") -> "ProbeOutcome":
        return cls(reason=reason, detail=detail)

    @property
    def ok(self) -> bool:
        return self.latency is not None


@dataclass(frozen=True)
class HostResult:
    """
    Aggregate of every probe sent to one host.

    Attributes:
        host: The address or name exactly as supplied by the caller.
        latencies: Successful round-trip times in completion order.
        failures: Failure reasons of the unsuccessful probes.
    """

    host: str
    latencies: Tuple[float, ...] = ()
    failures: Tuple[FailureReason, ...] = ()

    @classmethod
    def from_outcomes(cls, host: str, outcomes: Iterable[ProbeOutcome]) -> "HostResult":
        latencies: List[float] = []
        failures: List[FailureReason] = []
        for outcome in outcomes:
            if outcome.ok:
                latencies.append(outcome.latency)
            else:
                failures.append(outcome.reason)
        return cls(host=host, latencies=tuple(latencies), failures=tuple(failures))

    @property
    def attempts(self) -> int:
        return len(self.latencies) + len(self.failures)

    @property
    def responsive(self) -> bool:
        return bool(self.latencies)

    @property
    def best(self) -> Optional[float]:
        return min(self.latencies) if self.latencies else None


@dataclass
class LatencyPool:
    """
    Latencies collected across all hosts of one run.

    The pool is filled by a single collector, one :class:`HostResult` at a
    time, so it needs no locking of its own.

    Attributes:
        total_hosts: Number of hosts scheduled for the run.
        best_only: Pool only each host's fastest probe instead of all of them.
        latencies: Unordered successful round-trip times in microseconds.
        non_responsive: Hosts for which every probe failed.
        host_results: Every merged host result, in completion order.
    """

    total_hosts: int = 0
    best_only: bool = False
    latencies: List[float] = field(default_factory=list)
    non_responsive: int = 0
    host_results: List[HostResult] = field(default_factory=list)

    def merge(self, result: HostResult) -> None:
        self.host_results.append(result)
        if not result.responsive:
            self.non_responsive += 1
        elif self.best_only:
            self.latencies.append(result.best)
        else:
            self.latencies.extend(result.latencies)

    @property
    def responsive(self) -> int:
        return len(self.host_results) - self.non_responsive

    @property
    def complete(self) -> bool:
        return len(self.host_results) == self.total_hosts


@dataclass(frozen=True)
class StatsSummary:
    """
    Latency statistics for one run, in microseconds.

    The five latency fields are all ``None`` when no probe succeeded.
    """

    avg: Optional[float] = None
    median: Optional[float] = None
    p95: Optional[float] = None
    p99: Optional[float] = None
    max: Optional[float] = None
    sample_count: int = 0
    total_hosts: int = 0
    pings_per_host: int = 0
    timeout_secs: float = 0.0

    @property
    def has_latency(self) -> bool:
        return self.sample_count > 0


@dataclass(frozen=True)
class LocationRecord:
    """Where the machine running the measurement appears to be."""

    country: str
    country_code: str
    city: str
    latitude: float
    longitude: float

    def to_dict(self) -> dict:
        return {
            "country": self.country,
            "country_code": self.country_code,
            "city": self.city,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass(frozen=True)
class MeasurementResult:
    """
    The terminal record of a measurement round.

    Attributes:
        timestamp: Unix time in whole seconds at which the round completed.
        stats: Latency statistics over the pooled round-trip times.
        non_responsive_nodes: Hosts for which every probe failed.
        total_hosts: Hosts probed in the round.
        pings_per_host: Probes sent to each host.
        timeout_secs: Per-probe timeout in seconds.
        location: Location of the caller, when requested and resolved.
    """

    timestamp: int
    stats: StatsSummary
    non_responsive_nodes: int
    total_hosts: int
    pings_per_host: int
    timeout_secs: float
    location: Optional[LocationRecord] = None

    def __post_init__(self) -> None:
        if not 0 <= self.non_responsive_nodes <= self.total_hosts:
            raise ValueError(
                f"non_responsive_nodes={self.non_responsive_nodes} "
                f"outside 0..total_hosts={self.total_hosts}"
            )
