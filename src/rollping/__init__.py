"""Ping a batch of hosts concurrently and summarise the round-trip latencies."""

from __future__ import annotations

__version__ = "0.1.0"
