"""Associate fetched features with the sample points near them."""

from typing import Iterable, Sequence

from .classifier import classify
from .geo import distance_meters
from .models import Category, Coordinate, Feature, FeatureHit, SamplePoint, empty_flags


def nearest_vertex_distance(point: Coordinate, feature: Feature) -> float:
    """Distance in meters to the closest vertex of the feature.

    This looks at vertices only, so a long way whose interior passes near
    the point but whose vertices are all far away is not detected.
    """
    best = float("inf")
    for vertex in feature.points():
        d = distance_meters(point, vertex)
        if d < best:
            best = d
    return best


def associate(points: Sequence[Coordinate], radius: float,
              features: Iterable[Feature]) -> tuple[list[SamplePoint], dict[Category, bool]]:
    """Tag fresh sample points with the categories of features within radius.

    Returns the tagged samples (one per input point, same order) and the
    route-global flags, which are the OR of all per-sample flags.
    """
    samples = [SamplePoint(index=i, coordinate=p) for i, p in enumerate(points)]

    for feature in features:
        categories = classify(feature.tags)
        for sample in samples:
            d = nearest_vertex_distance(sample.coordinate, feature)
            if d <= radius:
                for category in categories:
                    sample.flags[category] = True
                sample.hits.append(FeatureHit(feature=feature, distance=d))

    global_flags = empty_flags()
    for sample in samples:
        for category, hit in sample.flags.items():
            if hit:
                global_flags[category] = True

    return samples, global_flags
