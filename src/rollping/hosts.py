from __future__ import annotations

import logging
from typing import Iterable, List, TextIO


def parse_hosts(lines: Iterable[str], *, dedupe: bool = False) -> List[str]:
    """Return the non-blank, whitespace-trimmed host entries in input order."""
    hosts = [line.strip() for line in lines if line.strip()]
    if not dedupe:
        return hosts

    seen = set()
    unique: List[str] = []
    for host in hosts:
        if host not in seen:
            seen.add(host)
            unique.append(host)
    if len(unique) != len(hosts):
        logging.info("Dropped %d duplicate hosts", len(hosts) - len(unique))
    return unique


def read_hosts(stream: TextIO, *, dedupe: bool = False) -> List[str]:
    """Read one host per line from a text stream."""
    return parse_hosts(stream, dedupe=dedupe)
