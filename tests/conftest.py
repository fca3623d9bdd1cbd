"""Test configuration and helper fixtures."""

from __future__ import annotations

import asyncio
import inspect
import struct
from pathlib import Path
from typing import Any, Dict, Iterable, List

import pytest

from rollping.models import FailureReason, ProbeOutcome


@pytest.hookimpl
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test-suite."""

    config.addinivalue_line("markers", "asyncio: run the test inside an event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute ``async def`` tests marked with ``@pytest.mark.asyncio``."""

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    fixture_names = pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
    call_kwargs = {name: pyfuncitem.funcargs[name] for name in fixture_names}
    asyncio.run(test_func(**call_kwargs))
    return True


class ScriptedProber:
    """Prober double replaying per-host latencies (microseconds) or failures."""

    def __init__(self, script: Dict[str, Iterable], delay: float = 0.0):
        self.script = {host: list(values) for host, values in script.items()}
        self.delay = delay
        self.calls: List[tuple] = []

    async def probe(self, host: str, timeout: float, sequence: int = 0) -> ProbeOutcome:
        self.calls.append((host, timeout, sequence))
        if self.delay:
            await asyncio.sleep(self.delay)
        values = self.script.get(host, [])
        value = values[sequence] if sequence < len(values) else FailureReason.TIMEOUT
        if isinstance(value, FailureReason):
            return ProbeOutcome.failure(value)
        return ProbeOutcome.success(value)


@pytest.fixture
def scripted_prober():
    """Factory for `ScriptedProber` instances."""

    return ScriptedProber


class _UInt:
    """Unsigned integer tagged with its MaxMind DB type code."""

    def __init__(self, type_code: int, value: int):
        self.type_code = type_code
        self.value = value


def _mmdb_control(type_code: int, size: int) -> bytes:
    if size < 29:
        size_bits, extra = size, b""
    elif size < 285:
        size_bits, extra = 29, bytes([size - 29])
    else:
        size_bits, extra = 30, (size - 285).to_bytes(2, "big")
    if type_code <= 7:
        return bytes([(type_code << 5) | size_bits]) + extra
    return bytes([size_bits, type_code - 7]) + extra


def _mmdb_encode(value: Any) -> bytes:
    if isinstance(value, _UInt):
        payload = value.value.to_bytes((value.value.bit_length() + 7) // 8, "big")
        return _mmdb_control(value.type_code, len(payload)) + payload
    if isinstance(value, str):
        payload = value.encode("utf-8")
        return _mmdb_control(2, len(payload)) + payload
    if isinstance(value, float):
        return _mmdb_control(3, 8) + struct.pack(">d", value)
    if isinstance(value, dict):
        body = b"".join(_mmdb_encode(k) + _mmdb_encode(v) for k, v in value.items())
        return _mmdb_control(7, len(value)) + body
    if isinstance(value, list):
        return _mmdb_control(11, len(value)) + b"".join(_mmdb_encode(v) for v in value)
    raise TypeError(f"cannot encode {value!r}")


def build_mmdb(record: Any, database_type: str = "GeoLite2-City") -> bytes:
    """
    Build a one-node IPv4 MaxMind DB whose lower half (0.0.0.0/1) maps to ``record``.
    """
    node_count = 1
    # 24-bit records: left points at data offset 0, right is "not found"
    tree = (node_count + 16).to_bytes(3, "big") + node_count.to_bytes(3, "big")
    metadata = {
        "binary_format_major_version": _UInt(5, 2),
        "binary_format_minor_version": _UInt(5, 0),
        "build_epoch": _UInt(9, 1700000000),
        "database_type": database_type,
        "description": {"en": "rollping test database"},
        "ip_version": _UInt(5, 4),
        "languages": ["en"],
        "node_count": _UInt(6, node_count),
        "record_size": _UInt(5, 24),
    }
    return (
        tree
        + b"\x00" * 16
        + _mmdb_encode(record)
        + b"\xab\xcd\xefMaxMind.com"
        + _mmdb_encode(metadata)
    )


CITY_RECORD = {
    "city": {"names": {"en": "Boxford"}},
    "country": {"iso_code": "GB", "names": {"en": "United Kingdom"}},
    "location": {"latitude": 51.75, "longitude": -1.25},
}


@pytest.fixture
def write_mmdb():
    """Write a MaxMind DB file built by `build_mmdb` and return its path."""

    def write(path: Path, record: Any = CITY_RECORD, database_type: str = "GeoLite2-City") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_mmdb(record, database_type))
        return path

    return write
