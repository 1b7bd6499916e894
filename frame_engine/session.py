"""
PD Capture Session - guided measurement state machine.

    INTRO -> FOCUS_CENTER -> FOLLOW_DOT -> MEASURING -> PROCESSING -> RESULTS

Timed transitions go through a Scheduler. Every start()/reset() bumps a
generation counter; a delayed callback only acts if both its generation
and its expected state are still current, so a rescan silently voids
anything scheduled by the previous attempt.

All mutation happens inside process_sample() or a scheduler callback,
both on the same thread.
"""

import logging
import uuid
from enum import Enum
from typing import Callable, List, Optional

from . import sample_filter
from .config import Settings, settings as default_settings
from .sample_filter import FaceSample
from .scheduler import Scheduler
from .temporal_filter import LivePDEstimate

logger = logging.getLogger(__name__)


class ScanState(str, Enum):
    INTRO = "intro"
    FOCUS_CENTER = "focus_center"
    FOLLOW_DOT = "follow_dot"
    MEASURING = "measuring"
    PROCESSING = "processing"
    RESULTS = "results"


STATUS_TEXT = {
    ScanState.INTRO: "Remove glasses and look at the Camera Lens.",
    ScanState.FOCUS_CENTER: "Look directly at the dot.",
    ScanState.FOLLOW_DOT: "Follow the dot with your eyes.",
    ScanState.MEASURING: "Measuring",
    ScanState.PROCESSING: "Calculating...",
    ScanState.RESULTS: "Measurement Complete!",
}
LOOK_FORWARD_TEXT = "Look forward and hold still"

StateListener = Callable[[ScanState, ScanState], None]
CompletionListener = Callable[[float], None]


class MeasurementSession:
    """
    Drives one PD capture from start to result.

    Usage:
        session = MeasurementSession(scheduler, on_complete=store_pd)
        session.start()
        for sample in feed:
            session.process_sample(sample)
    """

    def __init__(
        self,
        scheduler: Scheduler,
        config: Optional[Settings] = None,
        on_state_change: Optional[StateListener] = None,
        on_complete: Optional[CompletionListener] = None,
        session_id: Optional[str] = None
    ):
        """
        Args:
            scheduler: Delayed-callback capability
            config: Protocol timings and tolerances
            on_state_change: Called with (old, new) on every transition
            on_complete: Called with the final PD when RESULTS is reached
            session_id: Identifier used in log records
        """
        self.scheduler = scheduler
        self.config = config or default_settings
        self.on_state_change = on_state_change
        self.on_complete = on_complete
        self.session_id = session_id or uuid.uuid4().hex
        self.log = logging.LoggerAdapter(logger, {"session_id": self.session_id})

        self.state = ScanState.INTRO
        self.progress = 0.0
        self.status_text = STATUS_TEXT[ScanState.INTRO]
        self.sample_window: List[float] = []
        self.final_pd = 0.0

        self._live = LivePDEstimate(
            process_noise=self.config.live_process_noise,
            measurement_noise=self.config.live_measurement_noise,
        )
        self._generation = 0
        self._focus_scheduled = False
        self._follow_scheduled = False

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin (or restart) a capture."""
        self._generation += 1
        self._focus_scheduled = False
        self._follow_scheduled = False
        self.sample_window.clear()
        self.progress = 0.0
        self.final_pd = 0.0
        self._live.reset()
        self._set_state(ScanState.FOCUS_CENTER)

    def reset(self) -> None:
        """Rescan from any state; pending transitions become no-ops."""
        self.log.info("Capture reset from %s", self.state.value)
        self.start()

    def cancel(self) -> None:
        """Abandon the capture and return to the intro screen."""
        self._generation += 1
        self.sample_window.clear()
        self.progress = 0.0
        self._live.reset()
        self._set_state(ScanState.INTRO)

    def process_sample(self, sample: FaceSample) -> bool:
        """
        Handle one sensor frame.

        Returns:
            True if the frame added a reading to the window
        """
        if self.state == ScanState.FOCUS_CENTER:
            self._handle_focus(sample)
        elif self.state == ScanState.FOLLOW_DOT:
            self._handle_follow()
        elif self.state == ScanState.MEASURING:
            return self._handle_measuring(sample)
        return False

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def required_samples(self) -> int:
        return self.config.required_samples

    @property
    def live_pd(self) -> Optional[float]:
        return self._live.value

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_complete(self) -> bool:
        return self.state == ScanState.RESULTS

    def to_dict(self) -> dict:
        """Snapshot for the presentation layer."""
        live = self.live_pd
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "progress": round(self.progress, 4),
            "status_text": self.status_text,
            "samples": len(self.sample_window),
            "required_samples": self.required_samples,
            "live_pd_mm": round(live, 1) if live is not None else None,
            "final_pd_mm": self.final_pd if self.is_complete else None,
        }

    # ------------------------------------------------------------------
    # State handlers
    # ------------------------------------------------------------------

    def _handle_focus(self, sample: FaceSample) -> None:
        if self._focus_scheduled:
            return
        if not sample.is_looking_ahead(self.config.focus_gaze_tolerance):
            return
        self._focus_scheduled = True
        self._schedule(
            self.config.focus_delay_s,
            ScanState.FOCUS_CENTER,
            lambda: self._set_state(ScanState.FOLLOW_DOT),
        )

    def _handle_follow(self) -> None:
        if self._follow_scheduled:
            return
        self._follow_scheduled = True
        self._schedule(
            self.config.follow_delay_s,
            ScanState.FOLLOW_DOT,
            lambda: self._set_state(ScanState.MEASURING),
        )

    def _handle_measuring(self, sample: FaceSample) -> bool:
        looking = sample.is_looking_ahead(self.config.measure_gaze_tolerance)
        self.status_text = STATUS_TEXT[ScanState.MEASURING] if looking else LOOK_FORWARD_TEXT
        if not looking:
            return False

        distance_mm = sample_filter.calculate_distance(sample)
        if not sample_filter.accept(distance_mm):
            self.log.debug("Dropped implausible reading: %.2f mm", distance_mm)
            return False

        self.sample_window.append(distance_mm)
        self._live.update(distance_mm)
        self.progress = min(len(self.sample_window) / self.required_samples, 1.0)

        if len(self.sample_window) >= self.required_samples:
            self._finish_measuring()
        return True

    def _finish_measuring(self) -> None:
        self.final_pd = sample_filter.reduce(self.sample_window)
        self.log.info(
            "Window complete: %d readings, PD=%.1f mm",
            len(self.sample_window), self.final_pd
        )
        self._set_state(ScanState.PROCESSING)
        self._schedule(
            self.config.processing_delay_s,
            ScanState.PROCESSING,
            self._show_results,
        )

    def _show_results(self) -> None:
        self._set_state(ScanState.RESULTS)
        if self.on_complete is not None:
            self.on_complete(self.final_pd)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _set_state(self, new_state: ScanState) -> None:
        old_state = self.state
        self.state = new_state
        self.status_text = STATUS_TEXT[new_state]
        self.log.info("State %s -> %s", old_state.value, new_state.value)
        if self.on_state_change is not None:
            self.on_state_change(old_state, new_state)

    def _schedule(self, delay_s: float, expected_state: ScanState, action: Callable[[], None]) -> None:
        generation = self._generation

        def fire():
            if generation != self._generation or self.state != expected_state:
                self.log.debug(
                    "Stale transition ignored (expected %s, gen %d; now %s, gen %d)",
                    expected_state.value, generation, self.state.value, self._generation
                )
                return
            action()

        self.scheduler.call_later(delay_s, fire)
