"""
Reference coordinates for US cities, keyed "city, st" in lower case.
"""

from types import MappingProxyType
from typing import Final, Mapping, Tuple

_CITIES = {
    "new york, ny": (40.7128, -74.0060),
    "los angeles, ca": (34.0522, -118.2437),
    "chicago, il": (41.8781, -87.6298),
    "houston, tx": (29.7604, -95.3698),
    "phoenix, az": (33.4484, -112.0740),
    "philadelphia, pa": (39.9526, -75.1652),
    "san antonio, tx": (29.4241, -98.4936),
    "san diego, ca": (32.7157, -117.1611),
    "dallas, tx": (32.7767, -96.7970),
    "san jose, ca": (37.3382, -121.8863),
    "austin, tx": (30.2672, -97.7431),
    "jacksonville, fl": (30.3322, -81.6557),
    "fort worth, tx": (32.7555, -97.3308),
    "columbus, oh": (39.9612, -82.9988),
    "charlotte, nc": (35.2271, -80.8431),
    "san francisco, ca": (37.7749, -122.4194),
    "indianapolis, in": (39.7684, -86.1581),
    "seattle, wa": (47.6062, -122.3321),
    "denver, co": (39.7392, -104.9903),
    "washington, dc": (38.9072, -77.0369),
    "boston, ma": (42.3601, -71.0589),
    "nashville, tn": (36.1627, -86.7816),
    "detroit, mi": (42.3314, -83.0458),
    "portland, or": (45.5152, -122.6784),
    "las vegas, nv": (36.1699, -115.1398),
    "memphis, tn": (35.1495, -90.0490),
    "baltimore, md": (39.2904, -76.6122),
    "milwaukee, wi": (43.0389, -87.9065),
    "albuquerque, nm": (35.0844, -106.6504),
    "tucson, az": (32.2226, -110.9747),
    "fresno, ca": (36.7378, -119.7871),
    "sacramento, ca": (38.5816, -121.4944),
    "kansas city, mo": (39.0997, -94.5786),
    "atlanta, ga": (33.7490, -84.3880),
    "miami, fl": (25.7617, -80.1918),
    "tampa, fl": (27.9506, -82.4572),
    "orlando, fl": (28.5383, -81.3792),
    "cleveland, oh": (41.4993, -81.6944),
    "pittsburgh, pa": (40.4406, -79.9959),
    "cincinnati, oh": (39.1031, -84.5120),
    "minneapolis, mn": (44.9778, -93.2650),
    "st. louis, mo": (38.6270, -90.1994),
    "raleigh, nc": (35.7796, -78.6382),
    "new orleans, la": (29.9511, -90.0715),
    "salt lake city, ut": (40.7608, -111.8910),
}

KNOWN_CITIES: Final[Mapping[str, Tuple[float, float]]] = MappingProxyType(_CITIES)
