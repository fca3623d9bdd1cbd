from __future__ import annotations

import ipaddress
import logging
from typing import Optional, Union

from geoip2.errors import AddressNotFoundError
from maxminddb import InvalidDatabaseError

from ..models import LocationRecord
from .cache import GeoDatabase

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def resolve(db: GeoDatabase, self_ip: Union[str, IPAddress]) -> Optional[LocationRecord]:
    """
    Return the location of ``self_ip`` according to ``db``.

    Returns None, without raising, when the address is malformed, private or
    reserved, missing from the database, stored in an unreadable record, or
    when the record lacks any of country, country code, city, latitude or
    longitude.
    """
    try:
        ip = ipaddress.ip_address(str(self_ip).strip())
    except ValueError:
        logging.debug("GeoIP lookup skipped; not an IP address: %r", self_ip)
        return None
    if not ip.is_global:
        logging.debug("GeoIP lookup skipped; %s is not a public address", ip)
        return None

    try:
        city_data = db.city(str(ip))
    except (AddressNotFoundError, ValueError) as exc:
        logging.debug("GeoIP lookup for %s returned no data: %s", ip, exc)
        return None
    except (TypeError, InvalidDatabaseError) as exc:
        logging.warning("GeoIP database returned an unusable record for %s: %s", ip, exc)
        return None

    country = city_data.country.names.get("en")
    country_code = city_data.country.iso_code
    city = city_data.city.names.get("en")
    latitude = city_data.location.latitude
    longitude = city_data.location.longitude
    logging.debug("GeoIP lookup for %s: city=%r, country=%r", ip, city, country)

    if None in (country, country_code, city, latitude, longitude):
        logging.debug("GeoIP record for %s is incomplete", ip)
        return None
    return LocationRecord(
        country=country,
        country_code=country_code,
        city=city,
        latitude=float(latitude),
        longitude=float(longitude),
    )
