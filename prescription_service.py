"""
Eyewear Service - owns the prescription and the PD capture sessions.
Backs the HTTP API and the demo CLI.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from frame_engine.config import Settings, settings
from frame_engine.lens import LensIndex, lens_form, relative_thickness
from frame_engine.prescription import Prescription
from frame_engine.rules import evaluate
from frame_engine.sample_filter import FaceSample
from frame_engine.scheduler import AsyncioScheduler, Scheduler
from frame_engine.session import MeasurementSession

logger = logging.getLogger(__name__)


class EyewearService:
    """Presentation-session state: one prescription, any number of captures."""

    def __init__(self, scheduler: Optional[Scheduler] = None, config: Optional[Settings] = None):
        self.scheduler = scheduler or AsyncioScheduler()
        self.config = config or settings
        self.prescription = Prescription()
        self.sessions: Dict[str, MeasurementSession] = {}

    # ------------------------------------------------------------------
    # Prescription / recommendation
    # ------------------------------------------------------------------

    def recommend(self, prescription: Optional[Prescription] = None) -> Dict[str, Any]:
        """Evaluate a prescription (the owned one by default)."""
        target = prescription if prescription is not None else self.prescription
        return evaluate(target).to_dict()

    def get_prescription(self) -> Dict[str, Any]:
        return {
            "prescription": self.prescription.to_dict(),
            "recommendation": self.recommend(),
        }

    def update_prescription(self, prescription: Prescription) -> Dict[str, Any]:
        self.prescription = prescription
        return self.get_prescription()

    @staticmethod
    def lens_thickness(power: float, index: LensIndex) -> Dict[str, Any]:
        return {
            "power": power,
            "index": index.label,
            "form": lens_form(power),
            "relative_thickness": round(relative_thickness(power, index), 4),
        }

    # ------------------------------------------------------------------
    # PD capture
    # ------------------------------------------------------------------

    def start_session(self) -> Dict[str, Any]:
        """Start a capture; any earlier capture is abandoned and dropped."""
        for old_id in list(self.sessions):
            self.sessions.pop(old_id).cancel()

        session_id = uuid.uuid4().hex
        session = MeasurementSession(
            self.scheduler,
            config=self.config,
            on_complete=self._store_measured_pd,
            session_id=session_id,
        )
        self.sessions[session_id] = session
        session.start()
        return session.to_dict()

    def get_session(self, session_id: str) -> MeasurementSession:
        """Raises KeyError for an unknown id."""
        return self.sessions[session_id]

    def add_sample(self, session_id: str, sample: FaceSample) -> Dict[str, Any]:
        session = self.get_session(session_id)
        accepted = session.process_sample(sample)
        result = session.to_dict()
        result["accepted"] = accepted
        return result

    def reset_session(self, session_id: str) -> Dict[str, Any]:
        session = self.get_session(session_id)
        session.reset()
        return session.to_dict()

    def close_session(self, session_id: str) -> None:
        session = self.sessions.pop(session_id)
        session.cancel()

    def _store_measured_pd(self, pd_mm: float) -> None:
        self.prescription.set_measured_pd(pd_mm)
        logger.info("Captured PD written to prescription: %.1f mm", pd_mm)


# Singleton instance
_service = None

def get_service() -> EyewearService:
    global _service
    if _service is None:
        _service = EyewearService()
    return _service
