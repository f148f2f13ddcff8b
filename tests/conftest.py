import pytest

from useless_gps.config import CONFIG
from useless_gps.errors import FeatureFetchFailed
from useless_gps.logger import Logger
from useless_gps.models import Coordinate, Feature, FeatureSet, Place


class FakeClock:
    """Millisecond clock advanced by hand or by sleep()"""

    def __init__(self, now: float = 0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms

    def sleep(self, seconds: float):
        self.now += round(seconds * 1000)


class FakeGeocoder:
    def __init__(self, places: dict):
        self.places = places
        self.queries = []

    def geocode(self, query):
        self.queries.append(query)
        return self.places.get(query)


class FakeFetcher:
    """Returns queued results in order; exceptions in the queue are raised"""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def fetch_features(self, points, radius):
        self.calls.append((tuple(points), radius))
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return FeatureSet(features=tuple(result))


class RecordingAudio:
    def __init__(self):
        self.spoken = []

    def speak(self, text):
        self.spoken.append(text)


def water_at(coord: Coordinate, osm_id: int = 1) -> Feature:
    return Feature(kind="way", tags={"natural": "water"}, geometry=(coord,), osm_id=osm_id)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def quiet_logger():
    return Logger(echo=False)


@pytest.fixture
def config():
    # No retry loop on failed fetches
    return dict(CONFIG, fetch_retry_max_time=0)


@pytest.fixture
def equator_places():
    return {
        "Origin": Place(Coordinate(0.0, 0.0), "Null Island"),
        "East": Place(Coordinate(0.0, 1.0), "One Degree East"),
        "Nearby": Place(Coordinate(0.0, 0.00045), "Fifty Meters East"),
    }


@pytest.fixture
def fetch_failure():
    return FeatureFetchFailed("Overpass is down")
