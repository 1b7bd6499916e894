"""
Sample Filtering - PD plausibility gate and window reduction.

Sensor readings outside the adult PD range are dropped; the accepted
window is reduced with a lower-middle median rounded to 0.5 mm.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from .utils import (
    EYEBALL_RADIUS_M,
    MAX_PLAUSIBLE_PD_MM,
    METERS_TO_MM,
    MIN_PLAUSIBLE_PD_MM,
    euclidean_distance_3d,
    normalize,
    round_half,
)

Vector2 = Tuple[float, float]
Vector3 = Tuple[float, float, float]


@dataclass
class FaceSample:
    """
    One face-tracking frame.

    Positions are in metres in the sensor's world space; forward
    directions need not be normalised.
    """
    gaze: Vector2  # lookAt offset from straight ahead
    left_eye_center: Vector3
    right_eye_center: Vector3
    left_eye_forward: Vector3
    right_eye_forward: Vector3
    timestamp: Optional[float] = None

    def is_looking_ahead(self, tolerance: float) -> bool:
        """Check whether both gaze components are inside the tolerance band."""
        x, y = self.gaze
        return abs(x) < tolerance and abs(y) < tolerance

    @classmethod
    def from_dict(cls, data: dict) -> "FaceSample":
        return cls(
            gaze=tuple(data["gaze"]),
            left_eye_center=tuple(data["left_eye_center"]),
            right_eye_center=tuple(data["right_eye_center"]),
            left_eye_forward=tuple(data["left_eye_forward"]),
            right_eye_forward=tuple(data["right_eye_forward"]),
            timestamp=data.get("t"),
        )


def calculate_distance(sample: FaceSample, eyeball_radius_m: float = EYEBALL_RADIUS_M) -> float:
    """
    Raw inter-pupil distance in millimetres.

    Each pupil is projected from the eye centre along its forward
    direction by the eyeball radius:

        pupil = centre + normalize(forward) * r

    Args:
        sample: Face-tracking frame
        eyeball_radius_m: Eye centre to pupil distance in metres

    Returns:
        Distance between the projected pupils in mm
    """
    left_pupil = np.asarray(sample.left_eye_center, dtype=np.float64) + normalize(sample.left_eye_forward) * eyeball_radius_m
    right_pupil = np.asarray(sample.right_eye_center, dtype=np.float64) + normalize(sample.right_eye_forward) * eyeball_radius_m
    return euclidean_distance_3d(left_pupil, right_pupil) * METERS_TO_MM


def accept(raw_distance_mm: float) -> bool:
    """True if the reading lies strictly inside the plausible PD range."""
    return MIN_PLAUSIBLE_PD_MM < raw_distance_mm < MAX_PLAUSIBLE_PD_MM


def reduce(samples: Sequence[float]) -> float:
    """
    Reduce an accepted window to the final PD.

    Takes the element at index n // 2 of the sorted window (the
    lower-middle one for even n, no interpolation), then rounds it to
    the nearest 0.5 mm.

    Args:
        samples: Accepted distances in mm

    Returns:
        Final PD in mm, or 0.0 for an empty window
    """
    if not samples:
        return 0.0
    ordered = sorted(samples)
    median = ordered[len(ordered) // 2]
    return round_half(median)
