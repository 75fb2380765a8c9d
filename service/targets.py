"""
Target-length calculator.

Maps a length preference plus the current word count to a concrete target,
rounded to the nearest multiple of 25 (half-up).

    calculate_target_words(6, "concise")   -> 25
    calculate_target_words(120, "detailed") -> 175
"""

from __future__ import annotations
import math
from enum import Enum
from typing import Optional, Union

from service.text_utils import count_words

GRANULARITY = 25
MIN_TARGET = 20
BALANCED_FLOOR = 50


class LengthPreference(str, Enum):
    CONCISE = "concise"      # "Shorter": about half
    BALANCED = "balanced"    # "Same length"
    DETAILED = "detailed"    # "Longer": about one and a half

    @classmethod
    def parse(cls, value: Union[str, "LengthPreference"]) -> "LengthPreference":
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            raise ValueError(f"Unknown length preference: {value!r}") from None


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def calculate_target_words(current_words: int, preference: Union[str, LengthPreference]) -> int:
    if current_words < 0:
        raise ValueError("current_words must be >= 0")
    pref = LengthPreference.parse(preference)

    if pref is LengthPreference.CONCISE:
        target = max(MIN_TARGET, _round_half_up(current_words * 0.5))
    elif pref is LengthPreference.BALANCED:
        target = max(current_words, BALANCED_FLOOR)
    else:
        target = max(MIN_TARGET, _round_half_up(current_words * 1.5))

    return _round_half_up(target / GRANULARITY) * GRANULARITY


def target_for_text(
    text: str,
    preference: Union[str, LengthPreference],
    custom_target: Optional[int] = None,
) -> int:
    """An explicit custom target wins over the preference."""
    if custom_target is not None:
        if int(custom_target) < 1:
            raise ValueError("custom target must be a positive integer")
        return int(custom_target)
    return calculate_target_words(count_words(text), preference)
