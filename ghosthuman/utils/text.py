import math
import re

_SENTENCE_BOUNDARY_RE = re.compile(r"(?<=[.!?])\s+")


def words(text: str) -> list[str]:
    return text.split()


def word_count(text: str) -> int:
    return len(words(text))


def sentences(text: str) -> list[str]:
    return [chunk.strip() for chunk in _SENTENCE_BOUNDARY_RE.split(text) if chunk.strip()]


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def round_half_up(value: float, digits: int = 0) -> float:
    # round() is banker's rounding; scores are reported with .5 rounding up.
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
