"""OpenStreetMap collaborators: Nominatim geocoding and Overpass features."""

from typing import Optional, Sequence

import requests

from .config import CONFIG
from .errors import FeatureFetchFailed
from .models import Coordinate, Feature, FeatureSet, Place

# (element type, tag filter) pairs requested around every sample point
WANTED = [
    ("way", "[natural=water]"),
    ("way", "[waterway]"),
    ("way", "[landuse=forest]"),
    ("way", "[leisure=park]"),
    ("way", "[highway]"),
    ("way", "[railway]"),
    ("way", "[building]"),
    ("node", "[natural=peak]"),
]


def build_overpass_query(points: Sequence[Coordinate], radius: float,
                         config: Optional[dict] = None) -> str:
    """Union of `around` clauses for every point and wanted tag filter"""
    config = config or CONFIG
    precision = config["coordinate_precision"]
    clauses = []
    for p in points:
        for element, tag_filter in WANTED:
            clauses.append(
                f"{element}(around:{radius:.0f},{p.lat:.{precision}f},{p.lon:.{precision}f}){tag_filter};"
            )
    body = "\n".join(clauses)
    return f"[out:json][timeout:{config['overpass_timeout']}];\n(\n{body}\n);\nout geom;"


def _parse_element(el: dict) -> Optional[Feature]:
    kind = el.get("type")
    if kind not in ("way", "node"):
        return None
    tags = {str(k): str(v) for k, v in (el.get("tags") or {}).items()}
    geometry = tuple(Coordinate(lat=float(g["lat"]), lon=float(g["lon"]))
                     for g in el.get("geometry") or [])
    coordinate = None
    if el.get("lat") is not None and el.get("lon") is not None:
        coordinate = Coordinate(lat=float(el["lat"]), lon=float(el["lon"]))
    return Feature(kind=kind, tags=tags, geometry=geometry,
                   coordinate=coordinate, osm_id=el.get("id"))


def parse_elements(payload) -> list[Feature]:
    """Convert an Overpass JSON payload into features"""
    if not isinstance(payload, dict) or not isinstance(payload.get("elements"), list):
        raise FeatureFetchFailed("Overpass payload has no element list")
    features = []
    for el in payload["elements"]:
        if not isinstance(el, dict):
            raise FeatureFetchFailed(f"Malformed Overpass element: {el!r}")
        try:
            feature = _parse_element(el)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise FeatureFetchFailed(f"Malformed Overpass element {el.get('id')}: {e}") from e
        if feature:
            features.append(feature)
    return features


class OverpassClient:
    """Fetch tagged features near sample points via the Overpass API"""

    def __init__(self, config: Optional[dict] = None, session: Optional[requests.Session] = None):
        self.config = config or CONFIG
        self.session = session or requests.Session()

    def fetch_features(self, points: Sequence[Coordinate], radius: float) -> FeatureSet:
        query = build_overpass_query(points, radius, self.config)
        timeout = self.config["overpass_timeout"]
        try:
            response = self.session.post(
                self.config["overpass_url"],
                data=query.encode("utf-8"),
                headers={"Content-Type": "text/plain", "User-Agent": self.config["user_agent"]},
                timeout=timeout + 30,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise FeatureFetchFailed(f"Overpass request failed: {e}") from e
        except ValueError as e:
            raise FeatureFetchFailed(f"Overpass returned invalid JSON: {e}") from e
        return FeatureSet(features=tuple(parse_elements(payload)))


class NominatimGeocoder:
    """Resolve a place name to its first Nominatim match"""

    def __init__(self, config: Optional[dict] = None, session: Optional[requests.Session] = None):
        self.config = config or CONFIG
        self.session = session or requests.Session()

    def geocode(self, query: str) -> Optional[Place]:
        response = self.session.get(
            self.config["nominatim_url"],
            params={"format": "json", "q": query, "limit": 1},
            headers={"Accept": "application/json", "User-Agent": self.config["user_agent"]},
            timeout=self.config["geocode_timeout"],
        )
        response.raise_for_status()
        results = response.json()
        if not results:
            return None
        first = results[0]
        return Place(
            coordinate=Coordinate(lat=float(first["lat"]), lon=float(first["lon"])),
            name=first.get("display_name", query),
        )
