"""
Live PD Estimate - Kalman smoothing of accepted readings.

Gives the capture screen a steady running value while the window fills.
The final PD never comes from here; it is always the window median.
"""

from typing import Optional

import cv2
import numpy as np

TYPICAL_PD_MM = 63.0


class LivePDEstimate:
    """
    1D Kalman filter (state = PD in mm, constant-value model).
    """

    def __init__(
        self,
        process_noise: float = 0.1,
        measurement_noise: float = 0.5,
        initial_pd: Optional[float] = None
    ):
        """
        Args:
            process_noise: How much the PD may drift between frames
            measurement_noise: Uncertainty of a single sensor reading
            initial_pd: Prior PD (defaults to a typical adult value)
        """
        self.kf = cv2.KalmanFilter(1, 1)
        self.kf.transitionMatrix = np.array([[1.0]], dtype=np.float32)
        self.kf.measurementMatrix = np.array([[1.0]], dtype=np.float32)
        self.kf.processNoiseCov = np.array([[process_noise]], dtype=np.float32)
        self.kf.measurementNoiseCov = np.array([[measurement_noise]], dtype=np.float32)

        self.measurement_count = 0
        self.reset(initial_pd)

    def reset(self, initial_pd: Optional[float] = None):
        """Forget all readings."""
        prior = TYPICAL_PD_MM if initial_pd is None else initial_pd
        self.kf.statePre = np.array([[prior]], dtype=np.float32)
        self.kf.statePost = np.array([[prior]], dtype=np.float32)
        self.kf.errorCovPost = np.array([[1.0]], dtype=np.float32)
        self.measurement_count = 0

    def update(self, pd_mm: float) -> float:
        """
        Fold one accepted reading into the estimate.

        Returns:
            Smoothed PD in mm
        """
        if self.measurement_count == 0:
            # Seed from the first reading instead of the prior
            self.reset(pd_mm)

        self.kf.predict()
        self.kf.correct(np.array([[pd_mm]], dtype=np.float32))
        self.measurement_count += 1
        return self.value

    @property
    def value(self) -> Optional[float]:
        """Current estimate, or None before the first reading."""
        if self.measurement_count == 0:
            return None
        return float(self.kf.statePost[0, 0])

    @property
    def uncertainty(self) -> float:
        """Standard deviation of the estimate in mm."""
        return float(np.sqrt(self.kf.errorCovPost[0, 0]))
