"""Geographic utility functions."""

import math
import time
from typing import Callable

from .models import Coordinate

EARTH_RADIUS = 6371000  # meters


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters using Haversine formula"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    a = min(1.0, a)  # float noise on antipodal points
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS * c


def bearing_between(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate bearing from point 1 to point 2 in degrees (0-360, 0=North)"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_lambda = math.radians(lon2 - lon1)

    x = math.sin(delta_lambda) * math.cos(phi2)
    y = (math.cos(phi1) * math.sin(phi2) -
         math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda))

    # atan2(0, 0) is 0, so identical points face north
    bearing = math.degrees(math.atan2(x, y))
    return (bearing + 360) % 360


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def initial_bearing(a: Coordinate, b: Coordinate) -> float:
    return bearing_between(a.lat, a.lon, b.lat, b.lon)


def interpolate(a: Coordinate, b: Coordinate, t: float) -> Coordinate:
    """Linear interpolation in lat/lon space (not along the great circle)"""
    return Coordinate(
        lat=a.lat + (b.lat - a.lat) * t,
        lon=a.lon + (b.lon - a.lon) * t,
    )


def bearing_to_compass(bearing: float) -> str:
    """Convert bearing to compass direction"""
    directions = ["north", "northeast", "east", "southeast",
                  "south", "southwest", "west", "northwest"]
    index = round(bearing / 45) % 8
    return directions[index]


def retry_with_backoff(func, max_time: float = 30.0, initial_delay: float = 1.0,
                       max_delay: float = 8.0, description: str = "operation",
                       log: Callable[[str], None] = print,
                       sleep: Callable[[float], None] = time.sleep):
    """Retry a function with exponential backoff.

    Args:
        func: Function that returns a truthy value on success, falsy on failure
        max_time: Maximum total time to retry (seconds)
        initial_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        description: Description for logging
        log: Sink for progress lines
        sleep: Sleep function, replaceable in tests

    Returns:
        The result of func() on success, or None if all retries failed
    """
    start_time = time.monotonic()
    delay = initial_delay
    attempt = 1

    while True:
        result = func()
        if result:
            return result

        elapsed = time.monotonic() - start_time
        if elapsed >= max_time:
            log(f"Failed to complete {description} after {elapsed:.1f}s ({attempt} attempts)")
            return None

        remaining = max_time - elapsed
        sleep_time = min(delay, remaining, max_delay)
        if sleep_time > 0:
            log(f"Retrying {description} in {sleep_time:.1f}s (attempt {attempt})...")
            sleep(sleep_time)

        delay = min(delay * 2, max_delay)
        attempt += 1
