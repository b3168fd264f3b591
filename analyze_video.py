#!/usr/bin/env python3
"""
JointGuard - Command Line Analysis
Analyze a video (or a pre-extracted landmark file) without the dashboard.

Usage:
    python analyze_video.py climb.mp4 --activity climbing --name Alex
    python analyze_video.py --landmarks frames.json --activity squat --json report.json

Landmark files hold {"frames": [[[x, y, z, visibility], ... 33 rows], ...]};
null rows mark missing landmarks.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from Risk_Engine.core.actions import ActionConfig, ActivityType, CameraAngle, ExperienceLevel
from Risk_Engine.core.landmarks import LandmarkSet
from Risk_Engine.pipeline.video_session import analyze_landmark_frames, run_video_session


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="JointGuard movement risk analysis")
    parser.add_argument("video", nargs="?", help="Video file")
    parser.add_argument("--landmarks", "-l", help="Pre-extracted landmark JSON instead of a video")
    parser.add_argument("--activity", "-a", default=ActivityType.STANDING.value,
                        choices=[a.value for a in ActivityType], help="Activity type")
    parser.add_argument("--angle", default=CameraAngle.FRONT.value,
                        choices=[a.value for a in CameraAngle], help="Camera angle")
    parser.add_argument("--experience", "-e", choices=[e.value for e in ExperienceLevel],
                        help="Experience level (professional activities, recorded only)")
    parser.add_argument("--name", "-n", default=None, help="Display name for feedback")
    parser.add_argument("--json", "-j", help="Write the full report to this path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)
    if not args.video and not args.landmarks:
        parser.error("either a video or --landmarks is required")
    return args


def load_landmark_file(path):
    """Landmark sets from a JSON landmark file."""
    with open(path) as f:
        data = json.load(f)
    frames = data["frames"] if isinstance(data, dict) else data
    return [LandmarkSet([tuple(row) if row is not None else None for row in frame]) for frame in frames]


def print_report(result):
    summary = result.summary
    print("\n" + "=" * 50)
    print(f"  Activity:      {summary.activity_type.label}")
    print(f"  Frames:        {summary.frame_count}")
    print(f"  Overall risk:  {summary.overall_risk.value.upper()}")
    if summary.secondary_risk is not None:
        print(f"  Ligament load: {summary.secondary_risk.value.upper()}")
    print(f"  Key moments:   {len(summary.key_moments)}")
    print("=" * 50)

    if summary.issue_counts:
        print("\nIssues (frames):")
        for issue, count in summary.issue_counts.items():
            print(f"   {issue:<32} {count}")

    for record in summary.key_moments[:5]:
        print(f"   t={record.timestamp:6.2f}s  {record.risk_level.value:<6} {', '.join(record.issues)}")

    print(f"\n{summary.feedback}\n")
    print(result.message)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    config = ActionConfig(
        activity_type=ActivityType(args.activity),
        angle=CameraAngle(args.angle),
        experience_level=ExperienceLevel(args.experience) if args.experience else None,
    )

    if args.landmarks:
        print(f"Loading landmarks from {args.landmarks}...")
        result = analyze_landmark_frames(load_landmark_file(args.landmarks), config, args.name)
    else:
        print(f"Analyzing {args.video} ({config.activity_type.label})...")
        result = run_video_session(args.video, config, args.name,
                                   progress_callback=lambda p: print(f"\r   {p:3d}%", end="", flush=True))
        print()

    print_report(result)

    if args.json:
        Path(args.json).write_text(json.dumps(result.to_dict(), indent=2))
        print(f"\nReport saved to {args.json}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
