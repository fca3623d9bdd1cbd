from __future__ import annotations

from .cache import GeoCache, GeoDatabase, extract_database
from .public_ip import get_public_ip
from .resolver import resolve

__all__ = [
    "GeoCache",
    "GeoDatabase",
    "extract_database",
    "get_public_ip",
    "resolve",
]
