import pytest

from frame_engine.prescription import EyeMeasurement, Prescription
from frame_engine.rules import (
    HIGH_RX_EXCLUDED,
    NO_RULES_SUMMARY,
    VERY_HIGH_RX_EXCLUDED,
    evaluate,
)
from frame_engine.utils import FRAME_CATALOG, join_reasons


def rx(od_sph=0.0, od_cyl=0.0, os_sph=0.0, os_cyl=0.0, pd=None):
    return Prescription(
        od=EyeMeasurement(sphere=od_sph, cylinder=od_cyl, axis=90),
        os=EyeMeasurement(sphere=os_sph, cylinder=os_cyl, axis=90),
        pd=pd,
    )


@pytest.mark.parametrize("prescription", [
    rx(),
    rx(od_sph=-3.75, os_sph=-3.0),
    rx(od_sph=+2.0, od_cyl=-1.75, os_sph=+1.0, os_cyl=-1.0, pd=58.0),
    rx(od_sph=-1.0, os_sph=-2.5, pd=70.0),
    rx(pd=0.0),
])
def test_mild_prescription_keeps_every_frame(prescription):
    result = evaluate(prescription)
    assert result.active_rules == []
    assert result.recommended_frames == FRAME_CATALOG
    assert result.summary == NO_RULES_SUMMARY


def test_high_rx_myopia():
    result = evaluate(rx(od_sph=-6.0, os_sph=-6.0))
    assert result.titles == ["High Rx"]
    assert result.excluded_frames == {
        "aviator", "browline", "cateye", "geometric", "oversized", "rectangle", "square"
    }
    assert result.recommended_frames == {"oval", "round"}
    assert result.reasons == ["your prescription reaches -6.00 (myopia)"]


def test_high_rx_lower_bound_inclusive():
    assert evaluate(rx(od_sph=4.0, os_sph=4.0)).titles == ["High Rx"]
    assert evaluate(rx(od_sph=3.75, os_sph=3.75)).titles == []


def test_very_high_rx_hyperopia():
    result = evaluate(rx(od_sph=8.0, os_sph=8.0))
    assert result.titles == ["Very High Rx"]
    assert result.recommended_frames == {"oval", "round"}
    assert result.reasons == ["your prescription is very strong (+8.00 hyperopia)"]


def test_very_high_rx_excludes_same_frames_as_high_rx():
    # Known quirk: the stronger rule adds no restriction beyond High Rx.
    assert VERY_HIGH_RX_EXCLUDED == HIGH_RX_EXCLUDED
    assert evaluate(rx(od_sph=-7.0, os_sph=-7.0)).titles == ["Very High Rx"]


def test_narrow_pd():
    result = evaluate(rx(pd=55.0))
    assert result.titles == ["Narrow PD"]
    assert result.recommended_frames == {"cateye", "geometric", "oval", "rectangle", "round"}
    assert result.reasons == ["your PD is narrow (55.0 mm)"]


def test_wide_pd():
    result = evaluate(rx(pd=72.5))
    assert result.titles == ["Wide PD"]
    assert result.recommended_frames == FRAME_CATALOG - {"cateye", "oval", "round"}


@pytest.mark.parametrize("pd", [None, 0.0, -3.0, 58.0, 64.0, 70.0])
def test_pd_rules_do_not_fire(pd):
    titles = evaluate(rx(pd=pd)).titles
    assert "Narrow PD" not in titles
    assert "Wide PD" not in titles


def test_astigmatism_uses_larger_cylinder_magnitude():
    result = evaluate(rx(od_cyl=-0.5, os_cyl=-2.0))
    assert "Astigmatism" in result.titles
    assert not {"aviator", "cateye", "geometric", "oversized"} & result.recommended_frames
    assert {"rectangle", "square", "browline"} <= result.recommended_frames
    assert "your cylinder correction is significant (2.00 D)" in result.reasons


def test_anisometropia():
    result = evaluate(rx(od_sph=-1.0, os_sph=+1.0))
    assert result.titles == ["Anisometropia"]
    assert result.recommended_frames == FRAME_CATALOG - {"aviator", "browline", "oversized"}
    assert result.reasons == ["there's a notable power difference between your eyes (2.00 D)"]


def test_exclusions_are_unioned():
    result = evaluate(rx(pd=55.0, od_cyl=-2.5, os_cyl=-2.5))
    assert result.titles == ["Narrow PD", "Astigmatism"]
    assert result.recommended_frames == {"oval", "rectangle", "round"}


def test_all_frames_excluded_falls_back_to_round():
    # Very high Rx + wide PD + astigmatism + anisometropia
    result = evaluate(rx(od_sph=-12.0, od_cyl=-3.0, os_sph=-6.0, os_cyl=-1.0, pd=74.0))
    assert result.titles == ["Very High Rx", "Wide PD", "Astigmatism", "Anisometropia"]
    assert result.recommended_frames == {"round"}


def test_summary_grammar():
    one = evaluate(rx(pd=55.0))
    assert one.summary == (
        "Based on your PD is narrow (55.0 mm), these frames are curated to optimise "
        "your visual clarity and minimise lens edge thickness."
    )

    many = evaluate(rx(od_sph=-5.0, od_cyl=-2.0, os_sph=-2.0, pd=56.0))
    reasons = many.reasons
    assert many.titles == ["High Rx", "Narrow PD", "Astigmatism", "Anisometropia"]
    assert f"{reasons[0]}, {reasons[1]}, {reasons[2]} and {reasons[3]}" in many.summary


@pytest.mark.parametrize("reasons, expected", [
    ([], ""),
    (["a"], "a"),
    (["a", "b"], "a and b"),
    (["a", "b", "c"], "a, b and c"),
])
def test_join_reasons(reasons, expected):
    assert join_reasons(reasons) == expected


def test_evaluate_is_idempotent():
    prescription = rx(od_sph=-5.25, os_sph=-3.0, pd=57.0)
    first = evaluate(prescription)
    second = evaluate(prescription)
    assert first.recommended_frames == second.recommended_frames
    assert first.summary == second.summary
    assert first == second


def test_evaluate_does_not_modify_prescription():
    prescription = rx(od_sph=-5.25, pd=57.0)
    before = prescription.to_dict()
    evaluate(prescription)
    assert prescription.to_dict() == before


def test_to_dict_is_sorted_and_serialisable():
    data = evaluate(rx(pd=55.0)).to_dict()
    assert data["recommended_frames"] == ["cateye", "geometric", "oval", "rectangle", "round"]
    assert data["active_rules"] == [{"title": "Narrow PD", "reason": "your PD is narrow (55.0 mm)"}]
