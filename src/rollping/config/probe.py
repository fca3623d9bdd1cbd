from __future__ import annotations

from typing import Literal

from pydantic import Field

from ..constants import (
    DEFAULT_COUNT,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_PAYLOAD_SIZE,
    DEFAULT_TIMEOUT,
)
from .base import BaseConfig


class ProbeSettings(BaseConfig):
    """Settings for the ICMP probing round."""

    count: int = Field(DEFAULT_COUNT, gt=0, description="Number of pings to send to each host.")
    timeout: float = Field(
        DEFAULT_TIMEOUT, gt=0, description="Timeout in seconds for each ping."
    )
    max_concurrency: int = Field(
        DEFAULT_MAX_CONCURRENCY,
        gt=0,
        description="Maximum number of hosts being probed at the same time.",
    )
    interval: float = Field(
        0.0, ge=0, description="Pause in seconds between consecutive pings to one host."
    )
    payload_size: int = Field(
        DEFAULT_PAYLOAD_SIZE, ge=0, description="Size in bytes of the echo request payload."
    )
    privileged: bool = Field(
        False,
        description="Use raw ICMP sockets (requires root) instead of unprivileged datagram sockets.",
    )
    aggregate: Literal["all", "best"] = Field(
        "all",
        description="Pool every successful ping ('all') or only each host's fastest one ('best').",
    )
    dedupe_hosts: bool = Field(
        False, description="Drop repeated hosts from the input before probing."
    )
