from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from pydantic import Field

from ..constants import GEOIP_CACHE_DIR, GEOIP_DB_FILENAME, GEOIP_DB_URL, PUBLIC_IP_SERVICES
from .base import BaseConfig


class GeoSettings(BaseConfig):
    """Settings for locating the machine running the measurement."""

    enabled: bool = Field(False, description="Whether to include the caller's location.")
    cache_dir: Path = Field(
        GEOIP_CACHE_DIR, description="Directory holding the cached GeoLite2 City database."
    )
    db_filename: str = Field(
        GEOIP_DB_FILENAME, description="File name of the cached database inside cache_dir."
    )
    db_url: str = Field(
        GEOIP_DB_URL,
        description="Download location of the database; may contain a {license_key} placeholder.",
    )
    license_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("MAXMIND_LICENSE_KEY"),
        description="MaxMind license key substituted into db_url.",
    )
    download_timeout: float = Field(
        300.0, gt=0, description="Total timeout in seconds for downloading the database."
    )
    ip_services: List[str] = Field(
        default_factory=lambda: list(PUBLIC_IP_SERVICES),
        description="Services queried in order to learn the public IP address.",
    )
    ip_lookup_timeout: float = Field(
        5.0, gt=0, description="Timeout in seconds for each public IP service."
    )

    def resolved_db_url(self) -> str:
        if "{license_key}" in self.db_url:
            return self.db_url.format(license_key=self.license_key or "")
        return self.db_url
