"""Data classes for Useless GPS."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Category(str, Enum):
    """Semantic terrain/infrastructure classes a feature can fall into"""
    WATER = "water"
    RIVER = "river"
    FOREST = "forest"
    PARK = "park"
    HIGHWAY = "highway"
    RAILWAY = "railway"
    BUILDING = "building"
    PEAK = "peak"


def empty_flags() -> dict[Category, bool]:
    return {category: False for category in Category}


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    def __post_init__(self):
        if not -90 <= self.lat <= 90:
            raise ValueError(f"latitude out of range: {self.lat}")
        if not -180 <= self.lon <= 180:
            raise ValueError(f"longitude out of range: {self.lon}")

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}

    @classmethod
    def from_dict(cls, d: dict) -> "Coordinate":
        return cls(lat=float(d["lat"]), lon=float(d["lon"]))


@dataclass(frozen=True)
class Place:
    """A geocoded location"""
    coordinate: Coordinate
    name: str


@dataclass(frozen=True)
class Feature:
    """A tagged OSM element returned by the feature service.

    Ways carry their vertex list in `geometry`; nodes carry a single
    `coordinate` and an empty geometry.
    """
    kind: str  # "way" or "node"
    tags: dict[str, str]
    geometry: tuple[Coordinate, ...] = ()
    coordinate: Optional[Coordinate] = None
    osm_id: Optional[int] = None

    def points(self) -> list[Coordinate]:
        """Vertices used for proximity checks"""
        if self.geometry:
            return list(self.geometry)
        if self.coordinate is not None:
            return [self.coordinate]
        return []

    def to_dict(self) -> dict:
        d = {"type": self.kind, "id": self.osm_id, "tags": dict(self.tags)}
        if self.geometry:
            d["geometry"] = [c.to_dict() for c in self.geometry]
        if self.coordinate is not None:
            d.update(self.coordinate.to_dict())
        return d


@dataclass(frozen=True)
class FeatureSet:
    """Result of one feature fetch"""
    features: tuple[Feature, ...]


@dataclass
class FeatureHit:
    feature: Feature
    distance: float  # meters


@dataclass
class SamplePoint:
    """A probe coordinate on the straight line"""
    index: int
    coordinate: Coordinate
    flags: dict[Category, bool] = field(default_factory=empty_flags)
    hits: list[FeatureHit] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "lat": self.coordinate.lat,
            "lon": self.coordinate.lon,
            "flags": {c.value: v for c, v in self.flags.items()},
            "hits": [{"id": h.feature.osm_id, "distance": round(h.distance, 1)}
                     for h in self.hits],
        }


@dataclass(frozen=True)
class SamplePlan:
    """Adaptive sample layout for one route"""
    count: int
    radius: float  # meters, shared by every sample
    points: tuple[Coordinate, ...]


@dataclass(frozen=True)
class RouteAnalysis:
    global_flags: dict[Category, bool]
    error: bool
    samples: tuple[SamplePoint, ...]
    raw_features: tuple[Feature, ...]
    radius: float = 0.0

    @classmethod
    def failed(cls) -> "RouteAnalysis":
        return cls(global_flags={}, error=True, samples=(), raw_features=())


@dataclass
class PlaybackState:
    """Mutable state of one running playback, owned by the engine"""
    run_id: int
    current_step: int
    total_steps: int
    current_position: Coordinate
    last_fired_key: Optional[tuple[str, int]] = None
    last_fire_ms: Optional[float] = None
    fired_keys: set[tuple[str, int]] = field(default_factory=set)
