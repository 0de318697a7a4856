"""
Location lookup and great-circle distance.

geocode() accepts either "lat, lon" text or a US "City, ST" name and
returns Coordinates, or None when the location cannot be resolved.
Resolved lookups are cached per service instance.
"""

import logging
import math
import re
from typing import Dict, Mapping, Optional, Tuple

from ..constants import EARTH_RADIUS_MILES
from ..models import Coordinates
from .cities import KNOWN_CITIES

logger = logging.getLogger(__name__)

LAT_LON_RE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)$")
TRAILING_ZIP_RE = re.compile(r"\s+\d{5}(?:-\d{4})?$")


def normalize_location(text: str) -> str:
    """Cache key for a location string: trimmed, lower case, single spaces."""
    return " ".join(text.strip().lower().split())


class GeocodeCache:
    """
    Append-only map of normalised location to Coordinates.

    Not synchronised; give each session its own instance.
    """

    def __init__(self):
        self._entries: Dict[str, Coordinates] = {}

    def get(self, key: str) -> Optional[Coordinates]:
        return self._entries.get(key)

    def put(self, key: str, coordinates: Coordinates) -> None:
        self._entries[key] = coordinates

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class GeolocationService:
    """
    Resolves locations and measures distance between them.

    Usage:
        geo = GeolocationService()
        a = geo.geocode("Dallas, TX")
        b = geo.geocode("Austin, TX")
        miles = geo.distance(a, b)
    """

    def __init__(
        self,
        cities: Mapping[str, Tuple[float, float]] = KNOWN_CITIES,
        cache: Optional[GeocodeCache] = None,
    ):
        self._cities = cities
        self._cache = cache if cache is not None else GeocodeCache()

    @property
    def cache(self) -> GeocodeCache:
        return self._cache

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    def geocode(self, location: Optional[str]) -> Optional[Coordinates]:
        """
        Resolve a location to coordinates.

        Args:
            location: "lat, lon", "City, ST", "City, ST 12345" or "City"

        Returns:
            Coordinates, or None if unresolved
        """
        if not location or not location.strip():
            return None

        key = normalize_location(location)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        coordinates = self._parse_lat_lon(key) or self._lookup_city(key)
        if coordinates is None:
            logger.debug("Could not geocode %r", location)
            return None

        self._cache.put(key, coordinates)
        return coordinates

    @staticmethod
    def _parse_lat_lon(key: str) -> Optional[Coordinates]:
        match = LAT_LON_RE.match(key)
        if not match:
            return None
        latitude, longitude = float(match.group(1)), float(match.group(2))
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            return None
        return Coordinates(latitude, longitude)

    def _lookup_city(self, key: str) -> Optional[Coordinates]:
        key = TRAILING_ZIP_RE.sub("", key)
        if key in self._cities:
            return Coordinates(*self._cities[key])

        # City without a state: first table entry for that city name
        if "," not in key:
            for name, (latitude, longitude) in self._cities.items():
                if name.split(",")[0] == key:
                    return Coordinates(latitude, longitude)
        return None

    @staticmethod
    def distance(a: Coordinates, b: Coordinates) -> float:
        """
        Great-circle distance in miles, rounded to one decimal place.

        Args:
            a, b: Points to measure between

        Returns:
            Distance in miles
        """
        # Fixed argument order keeps distance(a, b) == distance(b, a) bit for bit
        first, second = sorted(((a.latitude, a.longitude), (b.latitude, b.longitude)))
        lat1, lon1 = first
        lat2, lon2 = second

        lat1_rad = math.radians(lat1)
        lat2_rad = math.radians(lat2)
        dlat = math.radians(lat2 - lat1)
        dlon = math.radians(lon2 - lon1)

        h = (
            math.sin(dlat / 2) ** 2
            + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
        )
        c = 2 * math.asin(math.sqrt(min(1.0, h)))
        return round(EARTH_RADIUS_MILES * c, 1)

    def distance_between(self, location_a: str, location_b: str) -> Optional[float]:
        """Distance between two location strings, or None if either is unresolved."""
        a = self.geocode(location_a)
        b = self.geocode(location_b)
        if a is None or b is None:
            return None
        return self.distance(a, b)
