"""GeoLite2 database caching.

The database is downloaded once into a well-known cache directory and then
reused by every later run without revalidation. Downloads are published with
an atomic rename, so an overlapping run either sees no file or a complete
one.
"""
from __future__ import annotations

import asyncio
import gzip
import io
import logging
import tarfile
import zlib
from pathlib import Path
from typing import Optional

import aiohttp
from geoip2.database import Reader
from geoip2.models import City
from maxminddb import InvalidDatabaseError

from ..config import GeoSettings
from ..exceptions import GeoUnavailable
from ..file_utils import publish_atomically

GZIP_MAGIC = b"\x1f\x8b"


def extract_database(data: bytes) -> bytes:
    """
    Return the raw MMDB bytes contained in a downloaded payload.

    Gzip payloads are decompressed first; tar archives (MaxMind ships
    ``.tar.gz``) yield their first ``.mmdb`` member. Anything else is
    assumed to already be a database.
    """
    if data[:2] == GZIP_MAGIC:
        data = gzip.decompress(data)

    buffer = io.BytesIO(data)
    if not tarfile.is_tarfile(buffer):
        return data

    buffer.seek(0)
    with tarfile.open(fileobj=buffer) as tar:
        for member in tar.getmembers():
            if member.isfile() and member.name.endswith(".mmdb"):
                extracted = tar.extractfile(member)
                if extracted is None:
                    continue
                return extracted.read()
    raise GeoUnavailable("archive does not contain an .mmdb file")


class GeoDatabase:
    """Read-only handle over an opened GeoLite2 City database."""

    def __init__(self, path: Path, reader: Reader) -> None:
        self.path = path
        self._reader = reader

    @classmethod
    def open(cls, path: Path) -> "GeoDatabase":
        try:
            reader = Reader(str(path))
        except (OSError, ValueError, InvalidDatabaseError) as exc:
            raise GeoUnavailable(f"cannot open GeoIP database {path}: {exc}") from exc

        database_type = reader.metadata().database_type
        if "City" not in database_type:
            reader.close()
            raise GeoUnavailable(f"{path} is a {database_type} database, not a City database")
        return cls(path, reader)

    def city(self, ip: str) -> City:
        """Look up ``ip``; raises ``AddressNotFoundError`` when absent."""
        return self._reader.city(ip)

    def close(self) -> None:
        """Gracefully close the GeoIP reader."""
        try:
            self._reader.close()
        except Exception as exc:
            logging.debug("GeoIP reader close failed: %s", exc)

    def __enter__(self) -> "GeoDatabase":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class GeoCache:
    """Download-once, reuse-forever cache for the GeoLite2 City database."""

    def __init__(
        self, settings: GeoSettings, session: Optional[aiohttp.ClientSession] = None
    ) -> None:
        self.settings = settings
        self._session = session

    def db_path(self, cache_dir: Optional[Path] = None) -> Path:
        return Path(cache_dir or self.settings.cache_dir) / self.settings.db_filename

    async def ensure_cached(self, cache_dir: Optional[Path] = None) -> GeoDatabase:
        """
        Return an opened database, downloading it first if it is not cached.

        Args:
            cache_dir: Overrides the configured cache directory.

        Raises:
            GeoUnavailable: If creating the directory, downloading,
                decompressing, publishing or opening the database fails.
        """
        db_path = self.db_path(cache_dir)
        if db_path.exists():
            logging.debug("Loading existing GeoIP database from %s", db_path)
            return GeoDatabase.open(db_path)

        logging.info("GeoIP database not found, downloading from mirror...")
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise GeoUnavailable(f"cannot create GeoIP cache directory: {exc}") from exc

        data = await self._download(self.settings.resolved_db_url())
        try:
            payload = extract_database(data)
        except (OSError, EOFError, tarfile.TarError, zlib.error) as exc:
            raise GeoUnavailable(f"cannot decompress GeoIP database: {exc}") from exc
        try:
            publish_atomically(db_path, payload)
        except OSError as exc:
            raise GeoUnavailable(f"cannot write GeoIP database to disk: {exc}") from exc

        logging.info("GeoIP database downloaded successfully to %s", db_path)
        return GeoDatabase.open(db_path)

    async def _download(self, url: str) -> bytes:
        logging.debug("Downloading GeoIP database from %s", url)
        session = self._session or aiohttp.ClientSession()
        try:
            async with session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.settings.download_timeout)
            ) as response:
                if response.status != 200:
                    raise GeoUnavailable(
                        f"failed to download GeoIP database: HTTP {response.status}"
                    )
                return await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise GeoUnavailable(f"failed to download GeoIP database: {exc}") from exc
        finally:
            if session is not self._session:
                await session.close()
