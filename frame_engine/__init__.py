"""
Frame Recommendation & PD Capture Engine

Recommends frame shapes from an eyewear prescription and measures
pupillary distance from a face-tracking sensor feed.
"""

from .prescription import EyeMeasurement, Prescription
from .rules import OpticalRule, RecommendationResult, evaluate
from .sample_filter import FaceSample
from .session import MeasurementSession, ScanState
from .utils import FRAME_CATALOG

__version__ = "0.1.0"
__all__ = [
    "EyeMeasurement",
    "Prescription",
    "OpticalRule",
    "RecommendationResult",
    "evaluate",
    "FaceSample",
    "MeasurementSession",
    "ScanState",
    "FRAME_CATALOG",
]
