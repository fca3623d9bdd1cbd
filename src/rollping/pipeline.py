"""One measurement round, from host list to `MeasurementResult`.

`run_measurement` wires the components together: it optionally locates the
caller first, then probes every host through the bounded `Scheduler`,
summarises the pooled latencies, and assembles the timestamped result.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional, Sequence

import aiohttp

from .assembler import assemble
from .config import GeoSettings, Settings
from .exceptions import GeoUnavailable, NetworkError
from .geo import GeoCache, get_public_ip, resolve
from .hosts import parse_hosts
from .models import LocationRecord, MeasurementResult
from .probing import HostRunner, Prober, Scheduler, validate_run
from .stats import summarize


async def locate_self(settings: GeoSettings) -> Optional[LocationRecord]:
    """
    Return the caller's location, or None if any step of the lookup fails.

    Geolocation faults never abort a run; they are logged as warnings.
    """
    async with aiohttp.ClientSession() as session:
        try:
            ip = await get_public_ip(
                settings.ip_services, timeout=settings.ip_lookup_timeout, session=session
            )
        except NetworkError as exc:
            logging.warning("Failed to detect public IP: %s", exc)
            return None
        logging.info("Detected public IP: %s", ip)

        try:
            db = await GeoCache(settings, session=session).ensure_cached()
        except GeoUnavailable as exc:
            logging.warning(
                "Failed to initialize GeoIP: %s. Geolocation will be disabled.", exc
            )
            return None

    with db:
        location = resolve(db, ip)
    if location is None:
        logging.warning("No GeoIP location found for %s", ip)
    else:
        logging.info(
            "Current location: %s, %s, %s",
            location.city,
            location.country,
            location.country_code,
        )
    return location


async def run_measurement(
    settings: Settings,
    hosts: Sequence[str],
    *,
    cancel_event: Optional[asyncio.Event] = None,
    prober: Optional[Prober] = None,
    clock: Callable[[], float] = time.time,
) -> MeasurementResult:
    """
    Run one bounded measurement round over ``hosts``.

    Args:
        settings: The application settings.
        hosts: Hosts to probe, in input order.
        cancel_event: When set, outstanding probes resolve as cancelled.
        prober: Probe implementation; built from the settings when omitted.
        clock: Source of the result timestamp.

    Raises:
        ConfigError: If the probe settings are invalid. No probing happens.
    """
    probe = settings.probe
    validate_run(probe.count, probe.timeout, probe.max_concurrency)
    logging.info(
        "Starting rollping with %d pings per host, %ss timeout", probe.count, probe.timeout
    )

    location = await locate_self(settings.geo) if settings.geo.enabled else None

    if probe.dedupe_hosts:
        hosts = parse_hosts(hosts, dedupe=True)
    if not hosts:
        logging.warning("No hosts provided")

    prober = prober or Prober(
        privileged=probe.privileged,
        payload_size=probe.payload_size,
        cancel_event=cancel_event,
    )
    scheduler = Scheduler(
        HostRunner(prober, interval=probe.interval),
        max_concurrency=probe.max_concurrency,
        best_only=probe.aggregate == "best",
        show_progress=settings.show_progress,
    )
    pool = await scheduler.run_all(list(hosts), probe.count, probe.timeout)

    stats = summarize(
        pool.latencies,
        total_hosts=pool.total_hosts,
        pings_per_host=probe.count,
        timeout_secs=probe.timeout,
    )
    return assemble(pool, stats, location, clock=clock)
