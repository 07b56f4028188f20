"""
Distance calculation utilities for proximity queries.
"""

import math
from typing import Dict

import numpy as np

# Earth's radius in meters
EARTH_RADIUS_M = 6371000.0

# Meters per degree of latitude (approximate, WGS84 mean)
METERS_PER_DEGREE = 111320.0


def haversine_distances(lat: float, lon: float, lats, lons) -> np.ndarray:
    """
    Vectorised great circle distance from one point to many.
    
    Args:
        lat, lon: Origin coordinates
        lats, lons: Array-likes of target coordinates
        
    Returns:
        Array of distances in meters, one per target
    """
    lats = np.radians(np.asarray(lats, dtype=float))
    lons = np.radians(np.asarray(lons, dtype=float))
    lat_rad = math.radians(lat)
    lon_rad = math.radians(lon)
    
    a = (np.sin((lats - lat_rad) / 2) ** 2 +
         math.cos(lat_rad) * np.cos(lats) * np.sin((lons - lon_rad) / 2) ** 2)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(np.clip(1 - a, 0.0, None)))
    
    return EARTH_RADIUS_M * c


def bounding_box(lat: float, lon: float, radius_m: float) -> Dict[str, float]:
    """
    Get a lat/lon box that contains every point within ``radius_m`` of the origin.
    
    The box is slightly generous so it can be used as a prefilter before an
    exact haversine check. Near the poles the longitude range covers the globe.
    
    Args:
        lat, lon: Origin coordinates
        radius_m: Radius in meters
        
    Returns:
        Dictionary with lat_min, lat_max, lon_min, lon_max
    """
    # 1% slack covers the spherical vs. flat approximation
    delta_lat = radius_m * 1.01 / METERS_PER_DEGREE
    cos_lat = math.cos(math.radians(lat))
    
    lat_min = max(-90.0, lat - delta_lat)
    lat_max = min(90.0, lat + delta_lat)
    
    if cos_lat < 1e-6 or abs(lat) + delta_lat >= 90.0:
        return {'lat_min': lat_min, 'lat_max': lat_max, 'lon_min': -180.0, 'lon_max': 180.0}
    
    delta_lon = min(180.0, delta_lat / cos_lat)
    return {
        'lat_min': lat_min,
        'lat_max': lat_max,
        'lon_min': max(-180.0, lon - delta_lon),
        'lon_max': min(180.0, lon + delta_lon)
    }
