"""
Risk Thresholds & Reference Values
Tuned heuristic cut points for the per-action frame analyzers and the session
aggregator.

All distances are in normalized image units (fraction of frame width/height),
all angles in degrees. These are 2D image-plane heuristics, not clinical
measurements.
"""

from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class RiskBands:
    """Score cut points mapping an accumulated frame score to a risk band."""
    high: int
    medium: int

    def level_for(self, score: int) -> str:
        if score >= self.high:
            return "high"
        if score >= self.medium:
            return "medium"
        return "low"

    def is_ligament_dominant(self, score: int) -> bool:
        """Any score past the medium cut point is treated as ligament-dominant loading."""
        return score >= self.medium


@dataclass(frozen=True)
class SamplingConfig:
    """
    Sampling assumptions for the landmark stream.

    Timestamps are derived as frame_index / fps rather than read from the
    source video, which is a known approximation.
    """
    FPS: float = 30.0
    MIN_VISIBILITY: float = 0.5   # shoulder-symmetry checks need both > 0.5

    def timestamp_for(self, frame_index: int) -> float:
        return frame_index / self.FPS


@dataclass(frozen=True)
class StandingThresholds:
    """
    Natural standing (front view).

    Head lateral shift:  |nose.x - shoulder_mid.x|
    Shoulder asymmetry:  |left_shoulder.y - right_shoulder.y|
    Torso lateral shift: |shoulder_mid.x - hip_mid.x|
    """
    HEAD_LATERAL_SHIFT: float = 0.08
    SHOULDER_ASYMMETRY: float = 0.06
    TORSO_LATERAL_SHIFT: float = 0.05

    HEAD_LATERAL_SHIFT_WEIGHT: int = 2
    SHOULDER_ASYMMETRY_WEIGHT: int = 2
    TORSO_LATERAL_SHIFT_WEIGHT: int = 1

    BANDS: RiskBands = RiskBands(high=3, medium=2)


@dataclass(frozen=True)
class SingleLegThresholds:
    """
    Single-leg stance. A dropping pelvis is the dominant signal; a smaller
    drop is reported as instability only.
    """
    PELVIS_DROP: float = 0.08
    PELVIS_INSTABILITY: float = 0.05
    TORSO_LEAN: float = 0.08
    SUPPORT_KNEE_VALGUS: float = 0.1
    ARM_ABDUCTION: float = 0.15
    NECK_LEAN: float = 0.1

    PELVIS_DROP_WEIGHT: int = 3
    PELVIS_INSTABILITY_WEIGHT: int = 1
    TORSO_LEAN_WEIGHT: int = 2
    SUPPORT_KNEE_VALGUS_WEIGHT: int = 2
    ARM_ABDUCTION_WEIGHT: int = 1
    NECK_LEAN_WEIGHT: int = 1

    BANDS: RiskBands = RiskBands(high=4, medium=2)


@dataclass(frozen=True)
class WalkingThresholds:
    """Natural gait, front view."""
    PELVIS_TILT: float = 0.06
    LEFT_KNEE_VALGUS: float = 0.08

    PELVIS_TILT_WEIGHT: int = 2
    LEFT_KNEE_VALGUS_WEIGHT: int = 1

    BANDS: RiskBands = RiskBands(high=2, medium=1)


@dataclass(frozen=True)
class SquatThresholds:
    """
    Bodyweight squat. Knee valgus dominates; the forward knee shift only
    nudges the score.
    """
    KNEE_VALGUS: float = 0.1
    KNEE_FORWARD_SHIFT: float = 0.1

    KNEE_VALGUS_WEIGHT: int = 3
    KNEE_FORWARD_SHIFT_WEIGHT: int = 1

    BANDS: RiskBands = RiskBands(high=4, medium=2)


@dataclass(frozen=True)
class ArmsOverheadThresholds:
    """Arms raised overhead. Arm angle is hip-shoulder-wrist."""
    SHOULDER_ELEVATION_ASYMMETRY: float = 0.06
    FORWARD_HEAD: float = 0.08
    MIN_ARM_ANGLE: float = 140.0

    SHOULDER_ELEVATION_ASYMMETRY_WEIGHT: int = 2
    FORWARD_HEAD_WEIGHT: int = 1
    LIMITED_ARM_ELEVATION_WEIGHT: int = 1

    BANDS: RiskBands = RiskBands(high=3, medium=2)


@dataclass(frozen=True)
class ClimbingThresholds:
    """
    Climbing (professional).

    Q-angle bands are mutually exclusive per leg: the higher band wins.
    Arm angle is the elbow angle shoulder-elbow-wrist; a near-straight arm
    hangs on passive structures.
    """
    LEFT_KNEE_VALGUS: float = 0.08
    Q_ANGLE_SEVERE: float = 25.0
    Q_ANGLE_ELEVATED: float = 20.0
    RIGHT_KNEE_INSTABILITY: float = 0.1
    SHOULDER_HEIGHT_DIFF: float = 0.08
    HEAD_FORWARD: float = 0.12
    ARM_LOCKOUT: float = 160.0

    LEFT_KNEE_VALGUS_WEIGHT: int = 2
    Q_ANGLE_SEVERE_WEIGHT: int = 3
    Q_ANGLE_ELEVATED_WEIGHT: int = 2
    RIGHT_KNEE_INSTABILITY_WEIGHT: int = 1
    SHOULDER_HEIGHT_DIFF_WEIGHT: int = 1
    HEAD_FORWARD_WEIGHT: int = 1
    ARM_LOCKOUT_WEIGHT: int = 1

    BANDS: RiskBands = RiskBands(high=4, medium=2)


@dataclass(frozen=True)
class SessionThresholds:
    """
    Session aggregation cut points.

    Counts are absolute frame counts, not proportions: a longer session
    accumulates into a higher overall risk more easily. Sustained risk is
    weighted over momentary risk, so summaries of different lengths are not
    directly comparable.
    """
    HIGH_FRAME_COUNT: int = 5      # > 5 high-risk frames = high overall
    MEDIUM_FRAME_COUNT: int = 10   # > 10 medium-risk frames = medium overall

    # Secondary (ligament-load) indicator from Q-angle tagged frames
    SECONDARY_MARKER: str = "q_angle"
    SECONDARY_HIGH_COUNT: int = 10
    SECONDARY_MEDIUM_COUNT: int = 5


# Aggregate all thresholds
RISK_THRESHOLDS: Dict[str, Any] = {
    'sampling': SamplingConfig(),
    'standing': StandingThresholds(),
    'single_leg_standing': SingleLegThresholds(),
    'walking': WalkingThresholds(),
    'squat': SquatThresholds(),
    'arms_overhead': ArmsOverheadThresholds(),
    'climbing': ClimbingThresholds(),
    'session': SessionThresholds(),
}


def get_session_risk_level(high_count: int, medium_count: int,
                           thresholds: SessionThresholds = RISK_THRESHOLDS['session']) -> str:
    """
    Overall session risk from frame counts.

    Args:
        high_count: Number of frames classified high
        medium_count: Number of frames classified medium
        thresholds: Session cut points

    Returns:
        "high", "medium" or "low"
    """
    if high_count > thresholds.HIGH_FRAME_COUNT:
        return "high"
    if medium_count > thresholds.MEDIUM_FRAME_COUNT:
        return "medium"
    return "low"


def get_secondary_risk_level(marker_count: int,
                             thresholds: SessionThresholds = RISK_THRESHOLDS['session']) -> str:
    """Ligament-load indicator from the number of Q-angle tagged frames."""
    if marker_count > thresholds.SECONDARY_HIGH_COUNT:
        return "high"
    if marker_count > thresholds.SECONDARY_MEDIUM_COUNT:
        return "medium"
    return "low"
