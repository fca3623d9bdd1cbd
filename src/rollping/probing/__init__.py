from __future__ import annotations

from .dns import HostResolver
from .host_runner import HostRunner
from .prober import Prober
from .scheduler import Scheduler, validate_run

__all__ = [
    "HostResolver",
    "HostRunner",
    "Prober",
    "Scheduler",
    "validate_run",
]
