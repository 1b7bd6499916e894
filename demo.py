#!/usr/bin/env python3
"""
Frame Recommendation Demo Script

Evaluate a prescription, or replay a recorded face-tracking feed through
the guided PD capture and show how the measured PD changes the result.

Usage:
    python demo.py recommend [options]
    python demo.py replay <recording.jsonl> [options]

Examples:
    python demo.py recommend --od-sphere -6.00 --os-sphere -5.50 --pd 63
    python demo.py replay capture.jsonl --od-sphere +2.25 --od-cylinder -2.00
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import List

from frame_engine.logging_conf import configure_logging
from frame_engine.prescription import Prescription
from frame_engine.rules import RecommendationResult, evaluate
from frame_engine.sample_filter import FaceSample
from frame_engine.scheduler import ManualScheduler
from frame_engine.session import MeasurementSession, ScanState
from frame_engine.utils import FRAME_CATALOG

FRAME_INTERVAL_S = 1.0 / 60.0
# Enough to clear the longest timed step after the feed ends
DRAIN_S = 5.0


def print_header(title: str) -> None:
    """Print formatted header."""
    line = "=" * 70
    print(f"\n{line}")
    print(f"  {title}")
    print(line)


def print_section(title: str) -> None:
    """Print formatted section header."""
    print(f"\n{'-' * 40}")
    print(f"  {title}")
    print(f"{'-' * 40}")


def prescription_from_args(args: argparse.Namespace) -> Prescription:
    return Prescription.from_text(
        od_sphere=args.od_sphere,
        od_cylinder=args.od_cylinder,
        od_axis=args.od_axis,
        os_sphere=args.os_sphere,
        os_cylinder=args.os_cylinder,
        os_axis=args.os_axis,
        pd=args.pd,
    )


def print_recommendation(prescription: Prescription, result: RecommendationResult) -> None:
    print_section("PRESCRIPTION")
    for label, eye in (("OD", prescription.od), ("OS", prescription.os)):
        print(f"  {label}: SPH {eye.sphere_value:+.2f}  CYL {eye.cylinder_value:+.2f}  "
              f"AXIS {eye.axis_value:3d}  SE {eye.spherical_equivalent:+.2f}")
    pd = prescription.pd_value
    print(f"  PD: {f'{pd:.1f} mm' if pd is not None else 'unknown'}")

    print_section("RECOMMENDATION")
    if result.active_rules:
        print(f"  Rules: {', '.join(result.titles)}")
    else:
        print("  Rules: none")
    for frame in sorted(FRAME_CATALOG):
        mark = "✓" if frame in result.recommended_frames else "✗"
        print(f"    {mark} {frame}")
    print(f"\n  {result.summary}")


def load_recording(path: str) -> List[FaceSample]:
    """Read one JSON sample per line, skipping blank lines."""
    samples = []
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line:
                samples.append(FaceSample.from_dict(json.loads(line)))
    return samples


def run_recommend(args: argparse.Namespace) -> None:
    print_header("FRAME RECOMMENDATION")
    prescription = prescription_from_args(args)
    print_recommendation(prescription, evaluate(prescription))


def run_replay(args: argparse.Namespace) -> None:
    if not os.path.exists(args.recording):
        print(f"Error: Recording not found: {args.recording}")
        sys.exit(1)

    print_header("PD CAPTURE REPLAY")
    samples = load_recording(args.recording)
    print(f"  Recording: {args.recording}")
    print(f"  Frames: {len(samples)}")

    prescription = prescription_from_args(args)
    scheduler = ManualScheduler()
    session = MeasurementSession(
        scheduler,
        on_state_change=lambda old, new: print(f"    {old.value} → {new.value}"),
        on_complete=prescription.set_measured_pd,
    )

    print_section("CAPTURE")
    session.start()
    for i, sample in enumerate(samples):
        timestamp = sample.timestamp if sample.timestamp is not None else i * FRAME_INTERVAL_S
        scheduler.advance_to(timestamp)
        session.process_sample(sample)
    scheduler.advance(DRAIN_S)

    print_section("RESULT")
    if session.state == ScanState.RESULTS:
        print(f"  ✓ PD: {session.final_pd:.1f} mm")
    else:
        print("  ✗ Capture did not complete")
        print(f"    State: {session.state.value}")
        print(f"    Readings: {len(session.sample_window)}/{session.required_samples}")

    print_recommendation(prescription, evaluate(prescription))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Frame recommendation and PD capture demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")

    rx = argparse.ArgumentParser(add_help=False)
    for eye in ("od", "os"):
        rx.add_argument(f"--{eye}-sphere", default="", help=f"{eye.upper()} sphere (e.g. -2.25)")
        rx.add_argument(f"--{eye}-cylinder", default="", help=f"{eye.upper()} cylinder")
        rx.add_argument(f"--{eye}-axis", default="", help=f"{eye.upper()} axis (0-180)")
    rx.add_argument("--pd", default="", help="Pupillary distance in mm")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("recommend", parents=[rx], help="Evaluate a prescription")
    replay = subparsers.add_parser("replay", parents=[rx], help="Replay a sensor recording")
    replay.add_argument("recording", help="JSON-lines sensor recording")

    args = parser.parse_args()
    configure_logging("DEBUG" if args.verbose else "WARNING")

    if args.command == "recommend":
        run_recommend(args)
    else:
        run_replay(args)

    print("\n✓ Done!")


if __name__ == "__main__":
    main()
