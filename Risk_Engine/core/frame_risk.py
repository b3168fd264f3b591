"""
Frame Risk Module
Per-frame risk record, ordered risk levels, dominant-load classification and
the analyzer-specific diagnostic structs.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from functools import total_ordering
from typing import Optional, Tuple, Dict, Any, Union

from Clinical_Research.risk_thresholds import RiskBands


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

@total_ordering
class RiskLevel(Enum):
    """Ordered risk band: low < medium < high."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def severity_score(self) -> int:
        return {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}[self]

    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.severity_score < other.severity_score


class DominantLoad(Enum):
    """Which structures are inferred to carry the load in a frame."""
    MUSCLE = "muscle"
    LIGAMENT = "ligament"


# -----------------------------------------------------------------------------
# Diagnostics (one struct per analyzer)
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class StandingDiagnostics:
    head_lateral_offset: Optional[float] = None
    shoulder_asymmetry: Optional[float] = None
    torso_lateral_offset: Optional[float] = None


@dataclass(frozen=True)
class SingleLegDiagnostics:
    pelvis_drop: Optional[float] = None
    torso_lean: Optional[float] = None
    left_knee_valgus: Optional[float] = None
    right_knee_valgus: Optional[float] = None
    arm_abduction: Optional[float] = None
    neck_lean: Optional[float] = None


@dataclass(frozen=True)
class WalkingDiagnostics:
    pelvis_tilt: Optional[float] = None
    left_knee_valgus: Optional[float] = None


@dataclass(frozen=True)
class SquatDiagnostics:
    left_knee_valgus: Optional[float] = None
    right_knee_valgus: Optional[float] = None
    knee_forward_offset: Optional[float] = None


@dataclass(frozen=True)
class ArmsOverheadDiagnostics:
    shoulder_elevation_asymmetry: Optional[float] = None
    forward_head_offset: Optional[float] = None
    arm_angle: Optional[float] = None


@dataclass(frozen=True)
class ClimbingDiagnostics:
    left_knee_valgus: Optional[float] = None
    right_knee_valgus: Optional[float] = None
    left_q_angle: Optional[float] = None
    right_q_angle: Optional[float] = None
    shoulder_height_diff: Optional[float] = None
    head_forward_offset: Optional[float] = None
    left_elbow_angle: Optional[float] = None
    right_elbow_angle: Optional[float] = None


FrameDiagnostics = Union[
    StandingDiagnostics, SingleLegDiagnostics, WalkingDiagnostics,
    SquatDiagnostics, ArmsOverheadDiagnostics, ClimbingDiagnostics,
]


def diagnostics_to_dict(diagnostics: FrameDiagnostics) -> Dict[str, float]:
    """Populated diagnostic fields only."""
    return {k: v for k, v in asdict(diagnostics).items() if v is not None}


# -----------------------------------------------------------------------------
# Frame Risk Record
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class FrameRiskRecord:
    """
    Risk classification for one analyzed frame.

    risk_level and dominant_load are derived from the score and the
    analyzer's cut points; they cannot be set independently.
    """
    frame_index: int
    timestamp: float
    risk_score: int
    bands: RiskBands
    issues: Tuple[str, ...] = ()
    diagnostics: FrameDiagnostics = StandingDiagnostics()

    @property
    def risk_level(self) -> RiskLevel:
        return RiskLevel(self.bands.level_for(self.risk_score))

    @property
    def dominant_load(self) -> DominantLoad:
        if self.bands.is_ligament_dominant(self.risk_score):
            return DominantLoad.LIGAMENT
        return DominantLoad.MUSCLE

    @property
    def primary_issue(self) -> Optional[str]:
        return self.issues[0] if self.issues else None

    def has_issue_containing(self, marker: str) -> bool:
        return any(marker in issue for issue in self.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'frame_index': self.frame_index,
            'timestamp': round(self.timestamp, 3),
            'risk_level': self.risk_level.value,
            'risk_score': self.risk_score,
            'issues': list(self.issues),
            'dominant_load': self.dominant_load.value,
            'diagnostics': {k: round(v, 4) for k, v in diagnostics_to_dict(self.diagnostics).items()},
        }
