"""
Lens index and relative thickness.

Edge (minus) or centre (plus) thickness scales with |power| and with
1 / (n - 1) for refractive index n. Values are normalised to the 1.59
polycarbonate baseline and capped so they can drive a cross-section view.
"""

from enum import Enum

PLANO_THRESHOLD_D = 0.25
THICKNESS_PER_DIOPTER = 0.082
MAX_THICKNESS_RATIO = 0.88


class LensIndex(str, Enum):
    POLY = "1.59"
    MID = "1.67"
    HIGH = "1.74"

    @property
    def label(self) -> str:
        return self.value

    @property
    def refractive_index(self) -> float:
        return float(self.value)


BASELINE_INDEX = LensIndex.POLY


def relative_thickness(power: float, index: LensIndex = BASELINE_INDEX) -> float:
    """
    Fraction of the display height taken by the thickest part of the lens.

    Args:
        power: Lens power in diopters (usually the spherical equivalent)
        index: Lens material

    Returns:
        Ratio in [0, 0.88]; 0 for plano lenses
    """
    if abs(power) < PLANO_THRESHOLD_D:
        return 0.0
    index_scale = (BASELINE_INDEX.refractive_index - 1.0) / (index.refractive_index - 1.0)
    return min(abs(power) * THICKNESS_PER_DIOPTER * index_scale, MAX_THICKNESS_RATIO)


def lens_form(power: float) -> str:
    """'minus' (thick edges), 'plus' (thick centre) or 'plano'."""
    if power < -PLANO_THRESHOLD_D:
        return "minus"
    if power > PLANO_THRESHOLD_D:
        return "plus"
    return "plano"
