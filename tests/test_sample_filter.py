import pytest

from frame_engine import sample_filter
from frame_engine.sample_filter import FaceSample, calculate_distance
from frame_engine.utils import round_half

from conftest import make_sample


@pytest.mark.parametrize("distance, expected", [
    (44.9, False),
    (45.0, False),
    (45.1, True),
    (62.0, True),
    (79.9, True),
    (80.0, False),
    (95.0, False),
])
def test_accept_bounds_are_exclusive(distance, expected):
    assert sample_filter.accept(distance) is expected


def test_reduce_odd_window_takes_middle():
    assert sample_filter.reduce([60.0, 61.0, 61.3, 62.7, 63.0]) == 61.5


def test_reduce_sorts_first():
    assert sample_filter.reduce([63.0, 60.0, 62.7, 61.3, 61.0]) == 61.5


def test_reduce_even_window_takes_upper_of_middle_pair_index():
    # n // 2 == 2 -> third smallest, no interpolation
    assert sample_filter.reduce([60.0, 61.0, 62.0, 64.0]) == 62.0


def test_reduce_sixty_samples():
    window = [60.0 + i * 0.1 for i in range(60)]
    # index 30 -> 63.0
    assert sample_filter.reduce(window) == 63.0


def test_reduce_empty_returns_zero():
    assert sample_filter.reduce([]) == 0.0


@pytest.mark.parametrize("value, expected", [
    (61.24, 61.0),
    (61.25, 61.5),
    (61.74, 61.5),
    (61.75, 62.0),
    (62.0, 62.0),
])
def test_round_half(value, expected):
    assert round_half(value) == expected


def test_distance_straight_ahead_equals_center_separation():
    assert calculate_distance(make_sample(62.0)) == pytest.approx(62.0)


def test_distance_projects_pupils_along_forward_direction():
    # Eyes converging: forward vectors tilt inward, pupils move closer
    sample = FaceSample(
        gaze=(0.0, 0.0),
        left_eye_center=(-0.032, 0.0, 0.0),
        right_eye_center=(0.032, 0.0, 0.0),
        left_eye_forward=(1.0, 0.0, 1.0),
        right_eye_forward=(-1.0, 0.0, 1.0),
    )
    inward = 0.012 / 2 ** 0.5
    expected_mm = (0.064 - 2 * inward) * 1000
    assert calculate_distance(sample) == pytest.approx(expected_mm)


def test_forward_vectors_are_normalised():
    scaled = FaceSample(
        gaze=(0.0, 0.0),
        left_eye_center=(-0.032, 0.0, 0.0),
        right_eye_center=(0.032, 0.0, 0.0),
        left_eye_forward=(5.0, 0.0, 5.0),
        right_eye_forward=(-5.0, 0.0, 5.0),
    )
    unit = FaceSample(
        gaze=(0.0, 0.0),
        left_eye_center=(-0.032, 0.0, 0.0),
        right_eye_center=(0.032, 0.0, 0.0),
        left_eye_forward=(1.0, 0.0, 1.0),
        right_eye_forward=(-1.0, 0.0, 1.0),
    )
    assert calculate_distance(scaled) == pytest.approx(calculate_distance(unit))


def test_gaze_gate():
    assert make_sample(gaze=(0.04, -0.04)).is_looking_ahead(0.05)
    assert not make_sample(gaze=(0.05, 0.0)).is_looking_ahead(0.05)
    assert not make_sample(gaze=(0.0, -0.2)).is_looking_ahead(0.1)


def test_sample_from_dict():
    sample = FaceSample.from_dict({
        "t": 0.5,
        "gaze": [0.01, 0.02],
        "left_eye_center": [-0.031, 0.0, 0.0],
        "right_eye_center": [0.031, 0.0, 0.0],
        "left_eye_forward": [0.0, 0.0, 1.0],
        "right_eye_forward": [0.0, 0.0, 1.0],
    })
    assert sample.timestamp == 0.5
    assert sample.gaze == (0.01, 0.02)
    assert calculate_distance(sample) == pytest.approx(62.0)
