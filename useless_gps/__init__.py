"""Useless GPS - Straight-line trips with terrain commentary."""

from .config import CONFIG
from .models import (
    Category,
    Coordinate,
    Place,
    Feature,
    FeatureSet,
    SamplePoint,
    SamplePlan,
    RouteAnalysis,
    PlaybackState,
)
from .errors import (
    UselessGPSError,
    InsufficientInput,
    GeocodeNotFound,
    FeatureFetchFailed,
    NoRouteDrawn,
    NoSamplesAvailable,
)
from .logger import Logger
from .geo import (
    haversine_distance,
    bearing_between,
    bearing_to_compass,
    distance_meters,
    initial_bearing,
    retry_with_backoff,
)
from .sampler import compute_sample_plan, adaptive_sample_count, adaptive_radius
from .classifier import classify
from .proximity import associate
from .messages import compose_summary, compose_for_sample
from .playback import PlaybackEngine, PlaybackEvent, PlaybackStatus, EventKind
from .osm import OverpassClient, NominatimGeocoder, build_overpass_query, parse_elements
from .audio import Audio
from .app import UselessGPS, SessionState
from .__main__ import main

__all__ = [
    "CONFIG",
    "Category",
    "Coordinate",
    "Place",
    "Feature",
    "FeatureSet",
    "SamplePoint",
    "SamplePlan",
    "RouteAnalysis",
    "PlaybackState",
    "UselessGPSError",
    "InsufficientInput",
    "GeocodeNotFound",
    "FeatureFetchFailed",
    "NoRouteDrawn",
    "NoSamplesAvailable",
    "Logger",
    "haversine_distance",
    "bearing_between",
    "bearing_to_compass",
    "distance_meters",
    "initial_bearing",
    "retry_with_backoff",
    "compute_sample_plan",
    "adaptive_sample_count",
    "adaptive_radius",
    "classify",
    "associate",
    "compose_summary",
    "compose_for_sample",
    "PlaybackEngine",
    "PlaybackEvent",
    "PlaybackStatus",
    "EventKind",
    "OverpassClient",
    "NominatimGeocoder",
    "build_overpass_query",
    "parse_elements",
    "Audio",
    "UselessGPS",
    "SessionState",
    "main",
]
