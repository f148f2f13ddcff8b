"""Tag-based feature classification."""

from typing import Mapping

from .models import Category


def classify(tags: Mapping[str, str]) -> set[Category]:
    """Return every category whose tag predicate matches.

    A feature may land in several categories (e.g. a way carrying both
    `highway` and `building` tags) or in none at all.
    """
    tags = tags or {}
    categories = set()
    if tags.get("natural") == "water" or "water" in tags:
        categories.add(Category.WATER)
    if "waterway" in tags:
        categories.add(Category.RIVER)
    if tags.get("landuse") == "forest":
        categories.add(Category.FOREST)
    if tags.get("leisure") == "park":
        categories.add(Category.PARK)
    if "highway" in tags:
        categories.add(Category.HIGHWAY)
    if "railway" in tags:
        categories.add(Category.RAILWAY)
    if "building" in tags:
        categories.add(Category.BUILDING)
    if tags.get("natural") == "peak":
        categories.add(Category.PEAK)
    return categories


def primary_category(tags: Mapping[str, str]):
    """Single category used for map styling, or None for untagged features"""
    matched = classify(tags)
    for category in Category:  # declaration order
        if category in matched:
            return category
    return None
