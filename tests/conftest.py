"""Shared pose builders for the risk engine tests."""

import sys
from pathlib import Path

import pytest

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from Risk_Engine.core.landmarks import LANDMARKS, LandmarkSet, Point2D

# Upright front-view pose: level shoulders and hips, straight vertical legs,
# arms hanging with a bent elbow. Every analyzer scores it 0 except
# arms_overhead, which needs raised arms (see OVERHEAD_WRISTS).
NEUTRAL_POSE = {
    'NOSE': (0.50, 0.15),
    'LEFT_SHOULDER': (0.40, 0.30),
    'RIGHT_SHOULDER': (0.60, 0.30),
    'LEFT_ELBOW': (0.33, 0.45),
    'RIGHT_ELBOW': (0.67, 0.45),
    'LEFT_WRIST': (0.35, 0.58),
    'RIGHT_WRIST': (0.65, 0.58),
    'LEFT_HIP': (0.45, 0.60),
    'RIGHT_HIP': (0.55, 0.60),
    'LEFT_KNEE': (0.45, 0.80),
    'RIGHT_KNEE': (0.55, 0.80),
    'LEFT_ANKLE': (0.45, 0.98),
    'RIGHT_ANKLE': (0.55, 0.98),
    'LEFT_HEEL': (0.45, 0.99),
    'RIGHT_HEEL': (0.55, 0.99),
    'LEFT_FOOT_INDEX': (0.43, 1.00),
    'RIGHT_FOOT_INDEX': (0.57, 1.00),
}

OVERHEAD_WRISTS = {
    'LEFT_WRIST': (0.40, 0.05),
    'RIGHT_WRIST': (0.60, 0.05),
    'LEFT_ELBOW': (0.40, 0.17),
    'RIGHT_ELBOW': (0.60, 0.17),
}

# Hip-ankle line length of the neutral legs; a knee shift of dx along x gives
# a valgus offset of -dx / LEG_LENGTH.
LEG_LENGTH = 0.38


def build_pose(overrides=None, missing=()):
    """LandmarkSet from the neutral pose with overridden / removed landmarks."""
    points = dict(NEUTRAL_POSE)
    points.update(overrides or {})
    for name in missing:
        points.pop(name, None)
    return LandmarkSet.from_points({
        LANDMARKS[name]: p if isinstance(p, Point2D) else Point2D(*p)
        for name, p in points.items()
    })


@pytest.fixture
def make_pose():
    return build_pose


@pytest.fixture
def neutral_pose():
    return build_pose()
