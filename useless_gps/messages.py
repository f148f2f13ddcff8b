"""Commentary text.

Both composers are ordered first-match-wins chains; the order is part of
the observable behaviour, so keep it stable.
"""

import random
from typing import Mapping, Optional

from .models import Category

NOTHING_INTERESTING = "Nothing interesting here... yawn."

SUMMARY_ERROR = "Overpass grumbled, analysis failed."
SUMMARY_WATERY = "Route appears watery, you might need a boat. You go swim!"
SUMMARY_PEAK = "Mountains detected, hope you like climbing."
SUMMARY_FOREST = "There's forest along the way, mind the wildlife."
SUMMARY_BUILDING = "Urban area ahead, honk responsibly."
SUMMARY_SHORT = "Short hop, slippers recommended."
SUMMARY_ALL_CLEAR = "All clearish, still useless, though."

SAMPLE_MESSAGES = [
    # (required categories, message)
    ((Category.WATER, Category.RIVER), "Lake and river at once? You go swim, twice!"),
    ((Category.WATER,), "You go swim!"),
    ((Category.RIVER,), "River crossing. Hope you packed a raft."),
    ((Category.PEAK,), "Climb time, bring boots!"),
    ((Category.FOREST,), "Forest ahead, bears included."),
    ((Category.PARK,), "Park vibes. Picnic when?"),
    ((Category.HIGHWAY,), "Cars! Dodge dramatically."),
    ((Category.RAILWAY,), "Railway. Don't be the film extra."),
    ((Category.BUILDING,), "Urban jungle, stay alert."),
]

ENDINGS = [
    "You made it along the useless line.",
    "That was very efficient and pointless.",
    "Next: a diagonal trip.",
]

FLOURISHES = [
    "(dramatic wind blows)",
    "Nani?!",
    "Believe it!",
    "*sparkles*",
    "Plot armor engaged.",
]


def _flag(flags: Optional[Mapping], category: Category) -> bool:
    if not flags:
        return False
    return bool(flags.get(category, False))


def compose_summary(global_flags: Optional[Mapping[Category, bool]], meters: float,
                    error: bool = False) -> str:
    """Single headline message for the whole route"""
    if error:
        return SUMMARY_ERROR
    if _flag(global_flags, Category.WATER) or _flag(global_flags, Category.RIVER):
        return SUMMARY_WATERY
    if _flag(global_flags, Category.PEAK):
        return SUMMARY_PEAK
    if _flag(global_flags, Category.FOREST):
        return SUMMARY_FOREST
    if _flag(global_flags, Category.BUILDING):
        return SUMMARY_BUILDING
    return SUMMARY_SHORT if meters / 1000 < 1 else SUMMARY_ALL_CLEAR


def compose_for_sample(sample_flags: Optional[Mapping[Category, bool]]) -> str:
    """Message for a single sample point"""
    for required, message in SAMPLE_MESSAGES:
        if all(_flag(sample_flags, c) for c in required):
            return message
    return NOTHING_INTERESTING


def is_interesting(message: str) -> bool:
    return message != NOTHING_INTERESTING


def pick_ending(rng: random.Random) -> str:
    return rng.choice(ENDINGS)


def embellish(message: str, rng: random.Random) -> str:
    """Append a random flourish; the base message is always kept intact"""
    return f"{message} {rng.choice(FLOURISHES)}"
