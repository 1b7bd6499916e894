"""
Prescription Data Model

Typed per-eye values plus PD. Entry text is converted at the boundary
(see from_text); unset values read as 0 wherever the rule engine needs a
number, except PD where anything <= 0 means "unknown".
"""

from dataclasses import dataclass, field
from typing import Optional

from .utils import (
    MAX_AXIS_DEGREES,
    MIN_AXIS_DEGREES,
    HIGH_RX_DIOPTERS,
    NARROW_PD_MM,
    parse_number,
)


def parse_axis(text: Optional[str]) -> Optional[int]:
    """Parse an axis entry; values outside [0, 180] are treated as unset."""
    value = parse_number(text)
    if value is None:
        return None
    if value < MIN_AXIS_DEGREES or value > MAX_AXIS_DEGREES:
        return None
    return int(round(value))


@dataclass
class EyeMeasurement:
    """One eye's entered values (diopters / degrees)."""
    sphere: Optional[float] = None
    cylinder: Optional[float] = None
    axis: Optional[int] = None  # Only meaningful when cylinder != 0

    @classmethod
    def from_text(cls, sphere: str = "", cylinder: str = "", axis: str = "") -> "EyeMeasurement":
        return cls(
            sphere=parse_number(sphere),
            cylinder=parse_number(cylinder),
            axis=parse_axis(axis),
        )

    @property
    def sphere_value(self) -> float:
        return self.sphere if self.sphere is not None else 0.0

    @property
    def cylinder_value(self) -> float:
        return self.cylinder if self.cylinder is not None else 0.0

    @property
    def axis_value(self) -> int:
        return self.axis if self.axis is not None else 0

    @property
    def spherical_equivalent(self) -> float:
        """Single-number summary of total lens power."""
        return self.sphere_value + self.cylinder_value / 2.0


@dataclass
class Prescription:
    """
    Both eyes (OD = right, OS = left) plus pupillary distance.

    Owned by the presentation session. The rule engine only reads it and
    the capture pipeline only ever writes `pd`.
    """
    od: EyeMeasurement = field(default_factory=EyeMeasurement)
    os: EyeMeasurement = field(default_factory=EyeMeasurement)
    pd: Optional[float] = None

    @classmethod
    def from_text(
        cls,
        od_sphere: str = "",
        od_cylinder: str = "",
        od_axis: str = "",
        os_sphere: str = "",
        os_cylinder: str = "",
        os_axis: str = "",
        pd: str = "",
    ) -> "Prescription":
        """Build a prescription from raw form entries."""
        return cls(
            od=EyeMeasurement.from_text(od_sphere, od_cylinder, od_axis),
            os=EyeMeasurement.from_text(os_sphere, os_cylinder, os_axis),
            pd=parse_number(pd),
        )

    @property
    def pd_value(self) -> Optional[float]:
        """PD in mm, or None when unknown."""
        if self.pd is None or self.pd <= 0:
            return None
        return self.pd

    @property
    def dominant_spherical_equivalent(self) -> float:
        """The SE with the larger magnitude; OD wins a tie."""
        od_se = self.od.spherical_equivalent
        os_se = self.os.spherical_equivalent
        return os_se if abs(os_se) > abs(od_se) else od_se

    @property
    def anisometropia(self) -> float:
        return abs(self.od.spherical_equivalent - self.os.spherical_equivalent)

    @property
    def dominant_cylinder(self) -> float:
        return max(abs(self.od.cylinder_value), abs(self.os.cylinder_value))

    @property
    def max_power_string(self) -> Optional[str]:
        se = self.dominant_spherical_equivalent
        if abs(se) < HIGH_RX_DIOPTERS:
            return None
        return f"{se:+.2f}"

    @property
    def narrow_pd_value(self) -> Optional[float]:
        pd = self.pd_value
        if pd is None or pd >= NARROW_PD_MM:
            return None
        return pd

    def set_measured_pd(self, pd_mm: float) -> None:
        """Store a captured PD the way the results sheet hands it back (one decimal)."""
        self.pd = parse_number(f"{pd_mm:.1f}")

    def to_dict(self) -> dict:
        return {
            "od": {"sphere": self.od.sphere, "cylinder": self.od.cylinder, "axis": self.od.axis},
            "os": {"sphere": self.os.sphere, "cylinder": self.os.cylinder, "axis": self.os.axis},
            "pd": self.pd,
        }
