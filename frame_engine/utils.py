"""
Utility functions and constants for the frame recommendation engine.
"""

import math
from typing import Optional, Sequence

import numpy as np


# Frame catalogue (closed set of shape identifiers)
FRAME_CATALOG = frozenset({
    "aviator", "browline", "cateye",
    "geometric", "oval", "oversized",
    "rectangle", "round", "square",
})

# Always-acceptable shape when every other frame is excluded
FALLBACK_FRAME = "round"

# Clinical thresholds (diopters / mm)
HIGH_RX_DIOPTERS = 4.0
VERY_HIGH_RX_DIOPTERS = 7.0
NARROW_PD_MM = 58.0
WIDE_PD_MM = 70.0
ASTIGMATISM_DIOPTERS = 2.0
ANISOMETROPIA_DIOPTERS = 2.0

# Anatomical constants
EYEBALL_RADIUS_M = 0.012  # Average eyeball radius, cornea to centre
METERS_TO_MM = 1000.0

# Biologically plausible adult PD range (exclusive bounds, mm)
MIN_PLAUSIBLE_PD_MM = 45.0
MAX_PLAUSIBLE_PD_MM = 80.0

# Axis domain (degrees)
MIN_AXIS_DEGREES = 0
MAX_AXIS_DEGREES = 180


def parse_number(text: Optional[str]) -> Optional[float]:
    """
    Parse a numeric entry the way the prescription form does.

    Every '+' is removed first. Surrounding whitespace and digit-group
    underscores are not accepted; anything that does not parse to a finite
    number yields None.

    Args:
        text: Raw user entry (e.g. "+1.25", "-3", "")

    Returns:
        Parsed value or None
    """
    if text is None:
        return None

    candidate = str(text).replace("+", "")
    if "_" in candidate or any(ch.isspace() for ch in candidate):
        return None

    try:
        value = float(candidate)
    except ValueError:
        return None

    if not math.isfinite(value):
        return None
    return value


def toggle_sign(text: str) -> str:
    """
    Flip the sign prefix of a diopter entry.

    "+1.25" -> "-1.25", "-1.25" -> "+1.25", "1.25" -> "+1.25", "" -> "+"
    """
    if text.startswith("+"):
        return "-" + text[1:]
    if text.startswith("-"):
        return "+" + text[1:]
    if text:
        return "+" + text
    return "+"


def round_half(value: float) -> float:
    """Round to the nearest 0.5, halves away from zero."""
    doubled = abs(value) * 2.0
    return math.copysign(math.floor(doubled + 0.5), value) / 2.0


def normalize(vector: Sequence[float]) -> np.ndarray:
    """Return the unit vector of a 3D direction (zero vector stays zero)."""
    v = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(v)
    if norm == 0:
        return v
    return v / norm


def euclidean_distance_3d(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Calculate Euclidean distance between two 3D points."""
    return float(np.linalg.norm(np.asarray(p2, dtype=np.float64) - np.asarray(p1, dtype=np.float64)))


def join_reasons(reasons: Sequence[str]) -> str:
    """
    Join reason clauses into one natural-language phrase.

    ["a"] -> "a", ["a", "b"] -> "a and b", ["a", "b", "c"] -> "a, b and c"
    """
    if not reasons:
        return ""
    if len(reasons) == 1:
        return reasons[0]
    return f"{', '.join(reasons[:-1])} and {reasons[-1]}"
