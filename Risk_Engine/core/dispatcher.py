"""
Frame Dispatcher
Selects the analyzer for an activity. Activities without a dedicated analyzer
(and unknown activity strings) fall back to the standing analyzer.
"""

import logging
from typing import Dict, List, Optional, Sequence, Union

from Clinical_Research.risk_thresholds import RISK_THRESHOLDS, SamplingConfig
from .actions import ActivityType
from .analyzers import (
    FrameAnalyzer, StandingAnalyzer, SingleLegStandingAnalyzer, WalkingAnalyzer,
    SquatAnalyzer, ArmsOverheadAnalyzer, ClimbingAnalyzer,
)
from .frame_risk import FrameRiskRecord
from .landmarks import LandmarkSet

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY = ActivityType.STANDING

ActivityLike = Union[ActivityType, str, None]


def build_registry(sampling: Optional[SamplingConfig] = None) -> Dict[ActivityType, FrameAnalyzer]:
    """Analyzer per activity with a dedicated rule set, plus the default entry."""
    analyzers = [
        StandingAnalyzer(sampling=sampling),
        SingleLegStandingAnalyzer(sampling=sampling),
        WalkingAnalyzer(sampling=sampling),
        SquatAnalyzer(sampling=sampling),
        ArmsOverheadAnalyzer(sampling=sampling),
        ClimbingAnalyzer(sampling=sampling),
    ]
    return {a.activity_type: a for a in analyzers}


ANALYZER_REGISTRY: Dict[ActivityType, FrameAnalyzer] = build_registry()


def resolve_activity(activity_type: ActivityLike) -> ActivityType:
    """Coerce strings to ActivityType; unknown values become the default."""
    if isinstance(activity_type, ActivityType):
        return activity_type
    if activity_type is None:
        return DEFAULT_ACTIVITY
    try:
        return ActivityType(activity_type)
    except ValueError:
        logger.warning(f"Unknown activity type {activity_type!r}, using {DEFAULT_ACTIVITY.value}")
        return DEFAULT_ACTIVITY


class FrameDispatcher:
    """Registry lookup with a guaranteed default analyzer."""

    def __init__(self, sampling: Optional[SamplingConfig] = None,
                 registry: Optional[Dict[ActivityType, FrameAnalyzer]] = None):
        self.sampling = sampling or RISK_THRESHOLDS['sampling']
        self.registry = dict(registry) if registry is not None else build_registry(self.sampling)
        if DEFAULT_ACTIVITY not in self.registry:
            self.registry[DEFAULT_ACTIVITY] = StandingAnalyzer(sampling=self.sampling)

    def get_analyzer(self, activity_type: ActivityLike) -> FrameAnalyzer:
        activity = resolve_activity(activity_type)
        analyzer = self.registry.get(activity)
        if analyzer is None:
            logger.debug(f"No dedicated analyzer for {activity.value}, using {DEFAULT_ACTIVITY.value}")
            analyzer = self.registry[DEFAULT_ACTIVITY]
        return analyzer

    def analyze_frame(self, pose: LandmarkSet, timestamp: float, index: int,
                      activity_type: ActivityLike = DEFAULT_ACTIVITY) -> FrameRiskRecord:
        return self.get_analyzer(activity_type).analyze(pose, timestamp, index)

    def analyze_sequence(self, poses: Sequence[LandmarkSet],
                         activity_type: ActivityLike = DEFAULT_ACTIVITY) -> List[FrameRiskRecord]:
        """Analyze an ordered frame sequence; timestamps are frame_index / fps."""
        analyzer = self.get_analyzer(activity_type)
        return [analyzer.analyze(pose, self.sampling.timestamp_for(i), i)
                for i, pose in enumerate(poses)]


_default_dispatcher = FrameDispatcher(registry=ANALYZER_REGISTRY)


def get_analyzer(activity_type: ActivityLike) -> FrameAnalyzer:
    return _default_dispatcher.get_analyzer(activity_type)


def analyze_frame(pose: LandmarkSet, timestamp: float, index: int,
                  activity_type: ActivityLike = DEFAULT_ACTIVITY) -> FrameRiskRecord:
    """Classify one frame with the analyzer for activity_type (default: standing)."""
    return _default_dispatcher.analyze_frame(pose, timestamp, index, activity_type)
