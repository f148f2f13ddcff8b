"""Adaptive sample placement along the straight line."""

import math
from typing import Optional

from .config import CONFIG
from .geo import distance_meters, interpolate
from .models import Coordinate, SamplePlan


def _clamp(value, low, high):
    return max(low, min(high, value))


def adaptive_sample_count(meters: float, config: Optional[dict] = None) -> int:
    """More samples for longer routes, within [min_samples, max_samples]"""
    config = config or CONFIG
    samples = math.ceil(meters / 1000 * config["sample_density_per_km"])
    return _clamp(samples, config["min_samples"], config["max_samples"])


def adaptive_radius(meters: float, config: Optional[dict] = None) -> float:
    """Proximity radius in meters, shared by every sample of the route"""
    config = config or CONFIG
    return float(_clamp(meters / config["radius_divisor"],
                        config["min_radius_meters"], config["max_radius_meters"]))


def compute_sample_plan(start: Coordinate, end: Coordinate,
                        config: Optional[dict] = None) -> SamplePlan:
    """Spread samples evenly over the open segment start..end.

    Sample i (1-based) sits at t = i / (count + 1), so no sample coincides
    with an endpoint and samples are ordered by t. Interpolation is linear
    in lat/lon, which is close enough for the short and medium routes this
    is meant for.
    """
    meters = distance_meters(start, end)
    count = adaptive_sample_count(meters, config)
    radius = adaptive_radius(meters, config)
    points = tuple(
        interpolate(start, end, i / (count + 1))
        for i in range(1, count + 1)
    )
    return SamplePlan(count=count, radius=radius, points=points)
