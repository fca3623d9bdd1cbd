"""Command-line interface for rollping.

This module provides the main entry point for the `rollping` command-line
tool. Hosts are read from standard input, one per line; the aggregated
result is written to standard output as a single JSON line and all logging
goes to standard error. Command-line arguments override values loaded from
the configuration file and the environment.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .config import Settings, load_config
from .exceptions import ConfigError
from .hosts import read_hosts
from .logging_config import setup_logging
from .models import MeasurementResult
from .output import render_json
from .pipeline import run_measurement
from .probing import validate_run


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the `rollping` command."""
    parser = argparse.ArgumentParser(
        prog="rollping",
        description="Ping multiple hosts and aggregate statistics",
    )
    parser.add_argument(
        "-c", "--count", type=int, help="Number of pings to send to each host (default: 3)"
    )
    parser.add_argument(
        "-t",
        "--timeout-secs",
        dest="timeout",
        type=float,
        help="Timeout in seconds for each ping (default: 2.0)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for WARN, -vv for INFO, -vvv for DEBUG)",
    )
    parser.add_argument(
        "-g",
        "--geo",
        action="store_true",
        default=None,
        help="Enable geolocation (fetches and includes location data)",
    )
    parser.add_argument(
        "--concurrency",
        dest="max_concurrency",
        type=int,
        help="Maximum number of hosts probed at the same time",
    )
    parser.add_argument("--cache-dir", type=Path, help="Directory for the cached GeoIP database")
    parser.add_argument(
        "--best-only",
        action="store_true",
        default=None,
        help="Use only the fastest ping of each host in the statistics",
    )
    parser.add_argument(
        "--dedupe",
        dest="dedupe_hosts",
        action="store_true",
        default=None,
        help="Probe repeated hosts only once",
    )
    parser.add_argument(
        "--progress",
        dest="show_progress",
        action="store_true",
        default=None,
        help="Show a progress bar on stderr",
    )
    parser.add_argument("--config", type=Path, help="Path to a YAML configuration file")
    return parser


def _update_settings_from_args(cfg: Settings, args: argparse.Namespace) -> None:
    """Override settings with any values given on the command line."""
    probe_fields = ("count", "timeout", "max_concurrency", "dedupe_hosts")
    for name in probe_fields:
        value = getattr(args, name, None)
        if value is not None:
            setattr(cfg.probe, name, value)
    if args.best_only:
        cfg.probe.aggregate = "best"
    if args.geo is not None:
        cfg.geo.enabled = args.geo
    if args.cache_dir is not None:
        cfg.geo.cache_dir = args.cache_dir
    if args.show_progress is not None:
        cfg.show_progress = args.show_progress


async def _measure(cfg: Settings, hosts: List[str]) -> MeasurementResult:
    """Run the measurement, cancelling outstanding probes on SIGINT/SIGTERM."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
            installed.append(sig)
        except (NotImplementedError, RuntimeError) as exc:
            logging.debug("Cannot install handler for %s: %s", sig, exc)
    try:
        return await run_measurement(cfg, hosts, cancel_event=cancel_event)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the `rollping` command."""
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    try:
        cfg = load_config(args.config)
        _update_settings_from_args(cfg, args)
        setup_logging(args.verbose, cfg.log_level)
        validate_run(cfg.probe.count, cfg.probe.timeout, cfg.probe.max_concurrency)
    except (ConfigError, ValidationError, ValueError) as exc:
        print(f"rollping: configuration error: {exc}", file=sys.stderr)
        sys.exit(2)

    hosts = read_hosts(sys.stdin)
    logging.info("Read %d hosts from stdin", len(hosts))

    result = asyncio.run(_measure(cfg, hosts))
    print(render_json(result), flush=True)


if __name__ == "__main__":
    main()
