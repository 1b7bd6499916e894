"""
Runtime configuration for the capture pipeline and API.

Values are read from the environment (and a local .env file, if present).
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    # PD capture protocol
    required_samples: int = int(os.getenv("PD_REQUIRED_SAMPLES", "60"))
    focus_delay_s: float = float(os.getenv("PD_FOCUS_DELAY_S", "1.5"))
    follow_delay_s: float = float(os.getenv("PD_FOLLOW_DELAY_S", "2.0"))
    processing_delay_s: float = float(os.getenv("PD_PROCESSING_DELAY_S", "1.5"))

    # Gaze gate tolerances (lookAt offset, both axes)
    focus_gaze_tolerance: float = float(os.getenv("PD_FOCUS_GAZE_TOLERANCE", "0.05"))
    measure_gaze_tolerance: float = float(os.getenv("PD_MEASURE_GAZE_TOLERANCE", "0.10"))

    # Live estimate smoothing (Kalman)
    live_process_noise: float = float(os.getenv("PD_LIVE_PROCESS_NOISE", "0.1"))
    live_measurement_noise: float = float(os.getenv("PD_LIVE_MEASUREMENT_NOISE", "0.5"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    allow_origin: str = os.getenv("ALLOW_ORIGIN", "*")


settings = Settings()
