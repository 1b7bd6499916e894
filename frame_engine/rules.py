"""
Optical Recommendation Engine

Evaluates six clinical heuristics against a prescription and returns the
frame shapes that survive all of them:

1. High Rx (4.00 D <= |SE| < 7.00 D) - large blanks thicken edges/centres
2. Very High Rx (|SE| >= 7.00 D) - only round/oval tolerate edge rolling
3. Narrow PD (< 58 mm) - wide frames force decentration and prism
4. Wide PD (> 70 mm) - narrow frames can't separate optical centres
5. Astigmatism (|CYL| >= 2.00 D) - tilt and wrap rotate the effective axis
6. Anisometropia (>= 2.00 D between eyes) - exposes the thickness mismatch
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List

from .prescription import Prescription
from .utils import (
    ANISOMETROPIA_DIOPTERS,
    ASTIGMATISM_DIOPTERS,
    FALLBACK_FRAME,
    FRAME_CATALOG,
    HIGH_RX_DIOPTERS,
    NARROW_PD_MM,
    VERY_HIGH_RX_DIOPTERS,
    WIDE_PD_MM,
    join_reasons,
)


NO_RULES_SUMMARY = (
    "Any frame style will work well for you. Every shape here is a great choice. "
    "Pick whatever you love."
)

SUMMARY_TEMPLATE = (
    "Based on {reasons}, these frames are curated to optimise your visual clarity "
    "and minimise lens edge thickness."
)

HIGH_RX_EXCLUDED = frozenset({
    "aviator", "browline", "cateye", "geometric",
    "oversized", "rectangle", "square",
})
# Same list as High Rx: round and oval always survive a strong prescription.
VERY_HIGH_RX_EXCLUDED = HIGH_RX_EXCLUDED
NARROW_PD_EXCLUDED = frozenset({"aviator", "browline", "oversized", "square"})
WIDE_PD_EXCLUDED = frozenset({"cateye", "oval", "round"})
ASTIGMATISM_EXCLUDED = frozenset({"aviator", "cateye", "geometric", "oversized"})
ANISOMETROPIA_EXCLUDED = frozenset({"aviator", "browline", "oversized"})


@dataclass(frozen=True)
class OpticalRule:
    """A single clinical reason that influenced the recommendation."""
    title: str  # Short chip label, e.g. "High Rx"
    reason: str  # Clause for the summary sentence
    frames_to_exclude: FrozenSet[str]


@dataclass(frozen=True)
class RecommendationResult:
    """Outcome of evaluating a prescription."""
    active_rules: List[OpticalRule] = field(default_factory=list)
    recommended_frames: FrozenSet[str] = FRAME_CATALOG
    summary: str = NO_RULES_SUMMARY

    @property
    def titles(self) -> List[str]:
        return [rule.title for rule in self.active_rules]

    @property
    def reasons(self) -> List[str]:
        return [rule.reason for rule in self.active_rules]

    @property
    def excluded_frames(self) -> FrozenSet[str]:
        return FRAME_CATALOG - self.recommended_frames

    def to_dict(self) -> dict:
        """Convert result to dictionary for serialization."""
        return {
            "active_rules": [
                {"title": rule.title, "reason": rule.reason}
                for rule in self.active_rules
            ],
            "recommended_frames": sorted(self.recommended_frames),
            "summary": self.summary,
        }


def _refraction_type(se: float) -> str:
    return "myopia" if se < 0 else "hyperopia"


def active_rules(prescription: Prescription) -> List[OpticalRule]:
    """All optical rules triggered by the prescription, in evaluation order."""
    rules: List[OpticalRule] = []

    se = prescription.dominant_spherical_equivalent
    pd = prescription.pd_value
    cylinder = prescription.dominant_cylinder
    aniso = prescription.anisometropia

    if HIGH_RX_DIOPTERS <= abs(se) < VERY_HIGH_RX_DIOPTERS:
        rules.append(OpticalRule(
            title="High Rx",
            reason=f"your prescription reaches {se:+.2f} ({_refraction_type(se)})",
            frames_to_exclude=HIGH_RX_EXCLUDED,
        ))

    if abs(se) >= VERY_HIGH_RX_DIOPTERS:
        rules.append(OpticalRule(
            title="Very High Rx",
            reason=f"your prescription is very strong ({se:+.2f} {_refraction_type(se)})",
            frames_to_exclude=VERY_HIGH_RX_EXCLUDED,
        ))

    if pd is not None and pd < NARROW_PD_MM:
        rules.append(OpticalRule(
            title="Narrow PD",
            reason=f"your PD is narrow ({pd:.1f} mm)",
            frames_to_exclude=NARROW_PD_EXCLUDED,
        ))

    if pd is not None and pd > WIDE_PD_MM:
        rules.append(OpticalRule(
            title="Wide PD",
            reason=f"your PD is wide ({pd:.1f} mm)",
            frames_to_exclude=WIDE_PD_EXCLUDED,
        ))

    if cylinder >= ASTIGMATISM_DIOPTERS:
        rules.append(OpticalRule(
            title="Astigmatism",
            reason=f"your cylinder correction is significant ({cylinder:.2f} D)",
            frames_to_exclude=ASTIGMATISM_EXCLUDED,
        ))

    if aniso >= ANISOMETROPIA_DIOPTERS:
        rules.append(OpticalRule(
            title="Anisometropia",
            reason=f"there's a notable power difference between your eyes ({aniso:.2f} D)",
            frames_to_exclude=ANISOMETROPIA_EXCLUDED,
        ))

    return rules


def evaluate(prescription: Prescription) -> RecommendationResult:
    """
    Evaluate the prescription and recommend frame shapes.

    Exclusions from every fired rule are unioned. If nothing is left,
    round is returned as the unconditional safe choice.

    Args:
        prescription: Prescription snapshot (not modified)

    Returns:
        RecommendationResult with rules, frames and summary
    """
    rules = active_rules(prescription)
    if not rules:
        return RecommendationResult()

    excluded = frozenset().union(*(rule.frames_to_exclude for rule in rules))
    recommended = FRAME_CATALOG - excluded
    if not recommended:
        recommended = frozenset({FALLBACK_FRAME})

    summary = SUMMARY_TEMPLATE.format(reasons=join_reasons([rule.reason for rule in rules]))

    return RecommendationResult(
        active_rules=rules,
        recommended_frames=recommended,
        summary=summary,
    )
