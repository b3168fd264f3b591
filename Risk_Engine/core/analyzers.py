"""
Frame Analyzers Module

One rule-based analyzer per supported activity. Each analyzer extracts the
landmarks it needs, computes 2D image-plane features, and compares each
feature against a fixed threshold. Every crossing adds one issue tag and a
fixed weight to the frame score; the score is then banded into low / medium /
high with analyzer-specific cut points.

A rule whose landmarks are missing (or, for shoulder-symmetry rules, not
confidently visible) is skipped for that frame. Missing landmarks never raise.

Issue tags are a public contract: the feedback translator matches on the
substrings "valgus" and "instability", and the session aggregator counts tags
containing "q_angle".
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple, List, Any

from Clinical_Research.risk_thresholds import (
    RISK_THRESHOLDS, SamplingConfig, StandingThresholds, SingleLegThresholds,
    WalkingThresholds, SquatThresholds, ArmsOverheadThresholds, ClimbingThresholds,
)
from .actions import ActivityType
from .frame_risk import (
    FrameRiskRecord, StandingDiagnostics, SingleLegDiagnostics, WalkingDiagnostics,
    SquatDiagnostics, ArmsOverheadDiagnostics, ClimbingDiagnostics, FrameDiagnostics,
)
from .geometry import calculate_angle, knee_valgus_offset, midpoint, q_angle
from .landmarks import LANDMARKS, LandmarkSet, Point2D

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Scoring
# -----------------------------------------------------------------------------

class RiskTally:
    """Running issue list and score for a single frame."""

    def __init__(self):
        self.issues: List[str] = []
        self.score = 0

    def flag(self, issue: str, weight: int):
        self.issues.append(issue)
        self.score += weight


# -----------------------------------------------------------------------------
# Base
# -----------------------------------------------------------------------------

class FrameAnalyzer(ABC):
    """Single-method interface: landmarks of one frame -> FrameRiskRecord."""

    activity_type: ActivityType
    DEFAULT_THRESHOLDS: Any = None

    def __init__(self, thresholds=None, sampling: Optional[SamplingConfig] = None):
        self.thresholds = thresholds or self.DEFAULT_THRESHOLDS
        self.sampling = sampling or RISK_THRESHOLDS['sampling']

    @abstractmethod
    def analyze(self, landmarks: LandmarkSet, timestamp: float, frame_index: int) -> FrameRiskRecord:
        """Classify one frame."""

    def _record(self, tally: RiskTally, timestamp: float, frame_index: int,
                diagnostics: FrameDiagnostics) -> FrameRiskRecord:
        record = FrameRiskRecord(
            frame_index=frame_index,
            timestamp=timestamp,
            risk_score=tally.score,
            bands=self.thresholds.BANDS,
            issues=tuple(tally.issues),
            diagnostics=diagnostics,
        )
        if tally.issues:
            logger.debug(f"{self.activity_type.value} frame {frame_index}: score={tally.score} "
                         f"level={record.risk_level.value} issues={tally.issues}")
        return record

    # -------------------------------------------------------------------------
    # Landmark helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _points(landmarks: LandmarkSet, *names: str) -> Optional[Tuple[Point2D, ...]]:
        """All named landmarks, or None if any is missing."""
        points = tuple(landmarks.get(LANDMARKS[name]) for name in names)
        if any(p is None for p in points):
            return None
        return points

    def _visible_shoulders(self, landmarks: LandmarkSet) -> Optional[Tuple[Point2D, Point2D]]:
        """Both shoulders, only when each is confidently visible."""
        left = landmarks.get_visible(LANDMARKS['LEFT_SHOULDER'], self.sampling.MIN_VISIBILITY)
        right = landmarks.get_visible(LANDMARKS['RIGHT_SHOULDER'], self.sampling.MIN_VISIBILITY)
        if left is None or right is None:
            return None
        return left, right

    def _head_offset(self, landmarks: LandmarkSet) -> Optional[float]:
        """|nose.x - shoulder_mid.x|"""
        points = self._points(landmarks, 'NOSE', 'LEFT_SHOULDER', 'RIGHT_SHOULDER')
        if points is None:
            return None
        nose, left, right = points
        return abs(nose.x - midpoint(left, right).x)

    def _shoulder_height_diff(self, landmarks: LandmarkSet) -> Optional[float]:
        shoulders = self._visible_shoulders(landmarks)
        if shoulders is None:
            return None
        left, right = shoulders
        return abs(left.y - right.y)

    def _torso_offset(self, landmarks: LandmarkSet) -> Optional[float]:
        """|shoulder_mid.x - hip_mid.x|"""
        points = self._points(landmarks, 'LEFT_SHOULDER', 'RIGHT_SHOULDER', 'LEFT_HIP', 'RIGHT_HIP')
        if points is None:
            return None
        ls, rs, lh, rh = points
        return abs(midpoint(ls, rs).x - midpoint(lh, rh).x)

    def _pelvis_tilt(self, landmarks: LandmarkSet) -> Optional[float]:
        points = self._points(landmarks, 'LEFT_HIP', 'RIGHT_HIP')
        if points is None:
            return None
        left, right = points
        return abs(left.y - right.y)

    def _knee_valgus(self, landmarks: LandmarkSet, side: str) -> Optional[float]:
        """Raw signed offset. Left-leg rules compare it directly, right-leg rules use abs()."""
        points = self._points(landmarks, f'{side}_HIP', f'{side}_KNEE', f'{side}_ANKLE')
        if points is None:
            return None
        return knee_valgus_offset(*points)

    def _q_angle(self, landmarks: LandmarkSet, side: str) -> Optional[float]:
        points = self._points(landmarks, f'{side}_HIP', f'{side}_KNEE', f'{side}_ANKLE')
        if points is None:
            return None
        return q_angle(*points)


def _max_defined(*values: Optional[float]) -> Optional[float]:
    defined = [v for v in values if v is not None]
    return max(defined) if defined else None


def _min_defined(*values: Optional[float]) -> Optional[float]:
    defined = [v for v in values if v is not None]
    return min(defined) if defined else None


# -----------------------------------------------------------------------------
# Basic posture
# -----------------------------------------------------------------------------

class StandingAnalyzer(FrameAnalyzer):
    """Natural standing. Also the fallback for activities without a dedicated analyzer."""

    activity_type = ActivityType.STANDING
    DEFAULT_THRESHOLDS: StandingThresholds = RISK_THRESHOLDS['standing']

    def analyze(self, landmarks: LandmarkSet, timestamp: float, frame_index: int) -> FrameRiskRecord:
        t = self.thresholds
        tally = RiskTally()

        head_offset = self._head_offset(landmarks)
        if head_offset is not None and head_offset > t.HEAD_LATERAL_SHIFT:
            tally.flag('head_lateral_shift', t.HEAD_LATERAL_SHIFT_WEIGHT)

        asymmetry = self._shoulder_height_diff(landmarks)
        if asymmetry is not None and asymmetry > t.SHOULDER_ASYMMETRY:
            tally.flag('shoulder_asymmetry', t.SHOULDER_ASYMMETRY_WEIGHT)

        torso_offset = self._torso_offset(landmarks)
        if torso_offset is not None and torso_offset > t.TORSO_LATERAL_SHIFT:
            tally.flag('torso_lateral_shift', t.TORSO_LATERAL_SHIFT_WEIGHT)

        return self._record(tally, timestamp, frame_index, StandingDiagnostics(
            head_lateral_offset=head_offset,
            shoulder_asymmetry=asymmetry,
            torso_lateral_offset=torso_offset,
        ))


class SingleLegStandingAnalyzer(FrameAnalyzer):
    """Single-leg stance: pelvis control, trunk lean, knee collapse, balance compensation."""

    activity_type = ActivityType.SINGLE_LEG_STANDING
    DEFAULT_THRESHOLDS: SingleLegThresholds = RISK_THRESHOLDS['single_leg_standing']

    def analyze(self, landmarks: LandmarkSet, timestamp: float, frame_index: int) -> FrameRiskRecord:
        t = self.thresholds
        tally = RiskTally()

        pelvis_drop = self._pelvis_tilt(landmarks)
        if pelvis_drop is not None:
            if pelvis_drop > t.PELVIS_DROP:
                tally.flag('pelvis_drop', t.PELVIS_DROP_WEIGHT)
            elif pelvis_drop > t.PELVIS_INSTABILITY:
                tally.flag('pelvic_instability', t.PELVIS_INSTABILITY_WEIGHT)

        torso_lean = self._torso_offset(landmarks)
        if torso_lean is not None and torso_lean > t.TORSO_LEAN:
            tally.flag('torso_lean', t.TORSO_LEAN_WEIGHT)

        # Either leg may be the support leg; one flag regardless of which collapses
        left_valgus = self._knee_valgus(landmarks, 'LEFT')
        right_valgus = self._knee_valgus(landmarks, 'RIGHT')
        left_collapse = left_valgus is not None and left_valgus > t.SUPPORT_KNEE_VALGUS
        right_collapse = right_valgus is not None and abs(right_valgus) > t.SUPPORT_KNEE_VALGUS
        if left_collapse or right_collapse:
            tally.flag('support_knee_valgus', t.SUPPORT_KNEE_VALGUS_WEIGHT)

        arm_abduction = _max_defined(
            self._arm_reach(landmarks, 'LEFT'), self._arm_reach(landmarks, 'RIGHT')
        )
        if arm_abduction is not None and arm_abduction > t.ARM_ABDUCTION:
            tally.flag('arm_abduction', t.ARM_ABDUCTION_WEIGHT)

        neck_lean = self._head_offset(landmarks)
        if neck_lean is not None and neck_lean > t.NECK_LEAN:
            tally.flag('neck_lean', t.NECK_LEAN_WEIGHT)

        return self._record(tally, timestamp, frame_index, SingleLegDiagnostics(
            pelvis_drop=pelvis_drop,
            torso_lean=torso_lean,
            left_knee_valgus=left_valgus,
            right_knee_valgus=right_valgus,
            arm_abduction=arm_abduction,
            neck_lean=neck_lean,
        ))

    def _arm_reach(self, landmarks: LandmarkSet, side: str) -> Optional[float]:
        """Horizontal wrist distance from its shoulder (arms thrown out for balance)."""
        points = self._points(landmarks, f'{side}_SHOULDER', f'{side}_WRIST')
        if points is None:
            return None
        shoulder, wrist = points
        return abs(wrist.x - shoulder.x)


class WalkingAnalyzer(FrameAnalyzer):
    activity_type = ActivityType.WALKING
    DEFAULT_THRESHOLDS: WalkingThresholds = RISK_THRESHOLDS['walking']

    def analyze(self, landmarks: LandmarkSet, timestamp: float, frame_index: int) -> FrameRiskRecord:
        t = self.thresholds
        tally = RiskTally()

        pelvis_tilt = self._pelvis_tilt(landmarks)
        if pelvis_tilt is not None and pelvis_tilt > t.PELVIS_TILT:
            tally.flag('pelvis_tilt', t.PELVIS_TILT_WEIGHT)

        left_valgus = self._knee_valgus(landmarks, 'LEFT')
        if left_valgus is not None and left_valgus > t.LEFT_KNEE_VALGUS:
            tally.flag('left_knee_valgus', t.LEFT_KNEE_VALGUS_WEIGHT)

        return self._record(tally, timestamp, frame_index, WalkingDiagnostics(
            pelvis_tilt=pelvis_tilt,
            left_knee_valgus=left_valgus,
        ))


class SquatAnalyzer(FrameAnalyzer):
    activity_type = ActivityType.SQUAT
    DEFAULT_THRESHOLDS: SquatThresholds = RISK_THRESHOLDS['squat']

    def analyze(self, landmarks: LandmarkSet, timestamp: float, frame_index: int) -> FrameRiskRecord:
        t = self.thresholds
        tally = RiskTally()

        left_valgus = self._knee_valgus(landmarks, 'LEFT')
        if left_valgus is not None and left_valgus > t.KNEE_VALGUS:
            tally.flag('left_knee_valgus', t.KNEE_VALGUS_WEIGHT)

        right_valgus = self._knee_valgus(landmarks, 'RIGHT')
        if right_valgus is not None and abs(right_valgus) > t.KNEE_VALGUS:
            tally.flag('right_knee_valgus', t.KNEE_VALGUS_WEIGHT)

        forward_offset = _max_defined(
            self._knee_ankle_offset(landmarks, 'LEFT'), self._knee_ankle_offset(landmarks, 'RIGHT')
        )
        if forward_offset is not None and forward_offset > t.KNEE_FORWARD_SHIFT:
            tally.flag('knee_forward_shift', t.KNEE_FORWARD_SHIFT_WEIGHT)

        return self._record(tally, timestamp, frame_index, SquatDiagnostics(
            left_knee_valgus=left_valgus,
            right_knee_valgus=right_valgus,
            knee_forward_offset=forward_offset,
        ))

    def _knee_ankle_offset(self, landmarks: LandmarkSet, side: str) -> Optional[float]:
        points = self._points(landmarks, f'{side}_KNEE', f'{side}_ANKLE')
        if points is None:
            return None
        knee, ankle = points
        return abs(knee.x - ankle.x)


class ArmsOverheadAnalyzer(FrameAnalyzer):
    activity_type = ActivityType.ARMS_OVERHEAD
    DEFAULT_THRESHOLDS: ArmsOverheadThresholds = RISK_THRESHOLDS['arms_overhead']

    def analyze(self, landmarks: LandmarkSet, timestamp: float, frame_index: int) -> FrameRiskRecord:
        t = self.thresholds
        tally = RiskTally()

        elevation_asym = self._shoulder_height_diff(landmarks)
        if elevation_asym is not None and elevation_asym > t.SHOULDER_ELEVATION_ASYMMETRY:
            tally.flag('shoulder_elevation_asymmetry', t.SHOULDER_ELEVATION_ASYMMETRY_WEIGHT)

        forward_head = self._head_offset(landmarks)
        if forward_head is not None and forward_head > t.FORWARD_HEAD:
            tally.flag('forward_head', t.FORWARD_HEAD_WEIGHT)

        # The less-raised arm decides
        arm_angle = _min_defined(self._arm_angle(landmarks, 'LEFT'), self._arm_angle(landmarks, 'RIGHT'))
        if arm_angle is not None and arm_angle < t.MIN_ARM_ANGLE:
            tally.flag('limited_arm_elevation', t.LIMITED_ARM_ELEVATION_WEIGHT)

        return self._record(tally, timestamp, frame_index, ArmsOverheadDiagnostics(
            shoulder_elevation_asymmetry=elevation_asym,
            forward_head_offset=forward_head,
            arm_angle=arm_angle,
        ))

    def _arm_angle(self, landmarks: LandmarkSet, side: str) -> Optional[float]:
        """Hip-shoulder-wrist angle; 180 is an arm fully overhead."""
        points = self._points(landmarks, f'{side}_HIP', f'{side}_SHOULDER', f'{side}_WRIST')
        if points is None:
            return None
        return calculate_angle(*points)


# -----------------------------------------------------------------------------
# Professional
# -----------------------------------------------------------------------------

class ClimbingAnalyzer(FrameAnalyzer):
    """Climbing: knee tracking (valgus, Q-angle), shoulder balance, head carriage, locked arms."""

    activity_type = ActivityType.CLIMBING
    DEFAULT_THRESHOLDS: ClimbingThresholds = RISK_THRESHOLDS['climbing']

    def analyze(self, landmarks: LandmarkSet, timestamp: float, frame_index: int) -> FrameRiskRecord:
        t = self.thresholds
        tally = RiskTally()

        left_valgus = self._knee_valgus(landmarks, 'LEFT')
        if left_valgus is not None and left_valgus > t.LEFT_KNEE_VALGUS:
            tally.flag('left_knee_valgus', t.LEFT_KNEE_VALGUS_WEIGHT)

        q_angles = {}
        for side in ('LEFT', 'RIGHT'):
            angle = self._q_angle(landmarks, side)
            q_angles[side] = angle
            if angle is None:
                continue
            prefix = side.lower()
            if angle > t.Q_ANGLE_SEVERE:
                tally.flag(f'{prefix}_q_angle_severe', t.Q_ANGLE_SEVERE_WEIGHT)
            elif angle > t.Q_ANGLE_ELEVATED:
                tally.flag(f'{prefix}_q_angle_elevated', t.Q_ANGLE_ELEVATED_WEIGHT)

        right_valgus = self._knee_valgus(landmarks, 'RIGHT')
        if right_valgus is not None and abs(right_valgus) > t.RIGHT_KNEE_INSTABILITY:
            tally.flag('right_knee_instability', t.RIGHT_KNEE_INSTABILITY_WEIGHT)

        shoulder_diff = self._shoulder_height_diff(landmarks)
        if shoulder_diff is not None and shoulder_diff > t.SHOULDER_HEIGHT_DIFF:
            tally.flag('shoulder_height_imbalance', t.SHOULDER_HEIGHT_DIFF_WEIGHT)

        head_forward = self._head_offset(landmarks)
        if head_forward is not None and head_forward > t.HEAD_FORWARD:
            tally.flag('head_forward', t.HEAD_FORWARD_WEIGHT)

        left_elbow = self._elbow_angle(landmarks, 'LEFT')
        right_elbow = self._elbow_angle(landmarks, 'RIGHT')
        locked = [a for a in (left_elbow, right_elbow) if a is not None and a > t.ARM_LOCKOUT]
        if locked:
            tally.flag('arm_lockout', t.ARM_LOCKOUT_WEIGHT)

        return self._record(tally, timestamp, frame_index, ClimbingDiagnostics(
            left_knee_valgus=left_valgus,
            right_knee_valgus=right_valgus,
            left_q_angle=q_angles['LEFT'],
            right_q_angle=q_angles['RIGHT'],
            shoulder_height_diff=shoulder_diff,
            head_forward_offset=head_forward,
            left_elbow_angle=left_elbow,
            right_elbow_angle=right_elbow,
        ))

    def _elbow_angle(self, landmarks: LandmarkSet, side: str) -> Optional[float]:
        points = self._points(landmarks, f'{side}_SHOULDER', f'{side}_ELBOW', f'{side}_WRIST')
        if points is None:
            return None
        return calculate_angle(*points)
