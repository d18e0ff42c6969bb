# src/forge_api/services/geolocation.py
"""IP geolocation backed by a MaxMind GeoLite2 City database."""

from __future__ import annotations

import hashlib
import ipaddress
import logging
from pathlib import Path
from typing import Any

import geoip2.database
import geoip2.errors

from forge_api.core.settings import settings
from forge_api.services.cache import Cache, get_cache

logger = logging.getLogger(__name__)

LOCATION_CACHE_SECONDS = 24 * 60 * 60

LOCATION_FIELDS = ("country_code", "country_name", "region_name", "city_name", "timezone")


def empty_location() -> dict[str, str | None]:
    return dict.fromkeys(LOCATION_FIELDS)


def is_local_ip(ip: str) -> bool:
    """True for private, reserved, loopback and unparseable addresses."""
    try:
        return not ipaddress.ip_address(ip).is_global
    except ValueError:
        return True


def open_reader(path: str) -> geoip2.database.Reader | None:
    if not Path(path).is_file():
        logger.warning("GeoIP database not found at %s", path)
        return None
    try:
        return geoip2.database.Reader(path)
    except Exception:
        logger.error("Failed to open GeoIP database %s", path, exc_info=True)
        return None


class GeolocationService:
    """Resolve client IPs to a country, region, city and timezone.

    Lookups are cached for a day. Local addresses and a missing database
    yield empty location data rather than errors.
    """

    def __init__(self, reader: Any | None = None, cache: Cache | None = None) -> None:
        self.reader = reader
        self.cache = cache if cache is not None else get_cache()

    def locate(self, ip: str | None) -> dict[str, str | None]:
        if not ip or is_local_ip(ip):
            return empty_location()
        key = "geolocation.ip." + hashlib.md5(ip.encode()).hexdigest()
        return dict(self.cache.remember(key, LOCATION_CACHE_SECONDS, lambda: self._lookup(ip)))

    def _lookup(self, ip: str) -> dict[str, str | None]:
        if self.reader is None:
            return empty_location()
        try:
            record = self.reader.city(ip)
        except geoip2.errors.AddressNotFoundError:
            logger.info("IP address %s not found in GeoIP database", ip)
            return empty_location()
        except Exception:
            logger.error("GeoIP lookup failed for %s", ip, exc_info=True)
            return empty_location()
        return {
            "country_code": record.country.iso_code,
            "country_name": record.country.name,
            "region_name": record.subdivisions.most_specific.name,
            "city_name": record.city.name,
            "timezone": record.location.time_zone,
        }


_GEOLOCATION: GeolocationService | None = None


def get_geolocation() -> GeolocationService:
    """Return the process-wide service; the database is opened once."""
    global _GEOLOCATION
    if _GEOLOCATION is None:
        _GEOLOCATION = GeolocationService(open_reader(settings.geoip_database_path))
    return _GEOLOCATION
