import math
from typing import Optional, Tuple

# Singapore approximate bounds
SG_MIN_LAT = 1.16
SG_MAX_LAT = 1.48
SG_MIN_LNG = 103.6
SG_MAX_LNG = 104.1

# Marina Bay, used when a route origin falls outside Singapore
FALLBACK_ORIGIN: Tuple[float, float] = (1.2838, 103.8606)

def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate distance between two points using Haversine formula
    Returns distance in kilometers
    """
    R = 6371  # Earth's radius in kilometers

    lat1, lon1, lat2, lon2 = map(math.radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = math.sin(dlat/2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon/2)**2
    root = math.sqrt(a)
    if root > 1:  # rounding on near-antipodal points
        root = 1.0
    c = 2 * math.asin(root)

    return R * c

def is_within_singapore(latitude: float, longitude: float) -> bool:
    """Check if coordinates fall inside the Singapore bounding box (inclusive)"""
    return (
        SG_MIN_LAT <= latitude <= SG_MAX_LAT and
        SG_MIN_LNG <= longitude <= SG_MAX_LNG
    )

def parse_lat_lng(value: Optional[str]) -> Optional[Tuple[float, float]]:
    """
    Parse a "lat,lng" string as returned by OneMap themes
    Returns None when the value is missing or malformed
    """
    if not value:
        return None

    parts = value.split(",")
    if len(parts) != 2:
        return None

    try:
        return float(parts[0]), float(parts[1])
    except ValueError:
        return None
