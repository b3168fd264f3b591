"""
Session Aggregation Module

Reduces an ordered sequence of frame risk records into one session summary:
overall risk from absolute frame counts, key moments (the worst band present,
in original frame order), a secondary ligament-load indicator for activities
that emit Q-angle tags, and a per-band feedback line.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Tuple, Optional, Sequence, Any

from Clinical_Research.risk_thresholds import (
    RISK_THRESHOLDS, SessionThresholds, get_session_risk_level, get_secondary_risk_level,
)
from .actions import ActivityType
from .dispatcher import ActivityLike, resolve_activity
from .frame_risk import FrameRiskRecord, RiskLevel
from ..utils.stats import StatsSummary, summarize_diagnostics

logger = logging.getLogger(__name__)

# Activities whose analyzer emits Q-angle tags
SECONDARY_INDICATOR_ACTIVITIES = frozenset({ActivityType.CLIMBING})

SESSION_FEEDBACK = {
    RiskLevel.LOW: "Your movement looks stable. Muscles are doing the work!",
    RiskLevel.MEDIUM: "Generally stable with some wobbles.",
    RiskLevel.HIGH: "Momentary high load on ligaments detected.",
}


@dataclass(frozen=True)
class SessionSummary:
    """Session-level result. Never mutated after creation."""
    overall_risk: RiskLevel
    key_moments: Tuple[FrameRiskRecord, ...]
    feedback: str
    activity_type: ActivityType
    secondary_risk: Optional[RiskLevel] = None
    frame_count: int = 0
    issue_counts: Dict[str, int] = field(default_factory=dict)
    diagnostic_stats: Dict[str, StatsSummary] = field(default_factory=dict)

    @property
    def needs_attention(self) -> bool:
        return self.overall_risk != RiskLevel.LOW

    @property
    def dominant_issue(self) -> Optional[str]:
        """First issue of the first key moment (what the feedback translator reads)."""
        if not self.key_moments:
            return None
        return self.key_moments[0].primary_issue

    def to_dict(self) -> Dict[str, Any]:
        return {
            'overall_risk': self.overall_risk.value,
            'key_moments': [f.to_dict() for f in self.key_moments],
            'feedback': self.feedback,
            'secondary_risk': self.secondary_risk.value if self.secondary_risk else None,
            'activity_type': self.activity_type.value,
            'frame_count': self.frame_count,
            'issue_counts': dict(self.issue_counts),
            'diagnostic_stats': {k: v.to_dict() for k, v in self.diagnostic_stats.items()},
        }


def count_issues(frames: Sequence[FrameRiskRecord]) -> Dict[str, int]:
    """Frames per issue tag, in first-seen order."""
    counts: Dict[str, int] = {}
    for frame in frames:
        for issue in frame.issues:
            counts[issue] = counts.get(issue, 0) + 1
    return counts


def secondary_risk_for(frames: Sequence[FrameRiskRecord],
                       thresholds: SessionThresholds = RISK_THRESHOLDS['session']) -> RiskLevel:
    """Ligament-load indicator from the raw count of Q-angle tagged frames."""
    marked = sum(1 for f in frames if f.has_issue_containing(thresholds.SECONDARY_MARKER))
    return RiskLevel(get_secondary_risk_level(marked, thresholds))


def summarize_analysis(frames: Sequence[FrameRiskRecord],
                       activity_type: ActivityLike = ActivityType.STANDING,
                       thresholds: SessionThresholds = RISK_THRESHOLDS['session']) -> SessionSummary:
    """
    Aggregate frame records into a session summary.

    Args:
        frames: Frame records in original order (may be empty)
        activity_type: Activity the frames were analyzed as
        thresholds: Session cut points

    Returns:
        SessionSummary
    """
    activity = resolve_activity(activity_type)
    high_frames = tuple(f for f in frames if f.risk_level == RiskLevel.HIGH)
    medium_frames = tuple(f for f in frames if f.risk_level == RiskLevel.MEDIUM)

    overall = RiskLevel(get_session_risk_level(len(high_frames), len(medium_frames), thresholds))
    key_moments = high_frames if high_frames else medium_frames

    secondary = None
    if activity in SECONDARY_INDICATOR_ACTIVITIES:
        secondary = secondary_risk_for(frames, thresholds)

    logger.info(f"Session {activity.value}: {len(frames)} frames, {len(high_frames)} high, "
                f"{len(medium_frames)} medium -> {overall.value}")

    return SessionSummary(
        overall_risk=overall,
        key_moments=key_moments,
        feedback=SESSION_FEEDBACK[overall],
        activity_type=activity,
        secondary_risk=secondary,
        frame_count=len(frames),
        issue_counts=count_issues(frames),
        diagnostic_stats=summarize_diagnostics(frames),
    )
