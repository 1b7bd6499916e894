import pytest

from frame_engine.config import Settings
from frame_engine.sample_filter import FaceSample
from frame_engine.scheduler import ManualScheduler
from frame_engine.session import MeasurementSession


def make_sample(pd_mm=62.0, gaze=(0.0, 0.0)):
    """Eyes on the x axis, both looking straight down +z."""
    half = pd_mm / 2000.0
    return FaceSample(
        gaze=gaze,
        left_eye_center=(-half, 0.0, -0.3),
        right_eye_center=(half, 0.0, -0.3),
        left_eye_forward=(0.0, 0.0, 1.0),
        right_eye_forward=(0.0, 0.0, 1.0),
    )


@pytest.fixture
def config():
    return Settings(
        required_samples=60,
        focus_delay_s=1.5,
        follow_delay_s=2.0,
        processing_delay_s=1.5,
        focus_gaze_tolerance=0.05,
        measure_gaze_tolerance=0.10,
    )


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def session(scheduler, config):
    return MeasurementSession(scheduler, config=config, session_id="test")
