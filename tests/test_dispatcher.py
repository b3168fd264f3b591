"""Frame dispatcher tests."""

import logging

import pytest

from conftest import build_pose
from Clinical_Research.risk_thresholds import SamplingConfig
from Risk_Engine.core.actions import ActivityType
from Risk_Engine.core.analyzers import ClimbingAnalyzer, SquatAnalyzer, StandingAnalyzer
from Risk_Engine.core.dispatcher import (
    ANALYZER_REGISTRY, DEFAULT_ACTIVITY, FrameDispatcher, analyze_frame, build_registry, get_analyzer,
    resolve_activity,
)

FALLBACK_ACTIVITIES = [
    ActivityType.SQUAT_EXERCISE, ActivityType.RUNNING, ActivityType.STRENGTH,
    ActivityType.VOLLEYBALL, ActivityType.MARTIAL_ARTS,
]


@pytest.fixture
def risky_pose():
    return build_pose({'NOSE': (0.65, 0.15), 'LEFT_KNEE': (0.40, 0.80), 'RIGHT_HIP': (0.55, 0.70)})


class TestRegistry:
    def test_default_is_standing(self):
        assert DEFAULT_ACTIVITY == ActivityType.STANDING
        assert isinstance(ANALYZER_REGISTRY[DEFAULT_ACTIVITY], StandingAnalyzer)

    def test_dedicated_analyzers(self):
        assert isinstance(get_analyzer(ActivityType.CLIMBING), ClimbingAnalyzer)
        assert isinstance(get_analyzer('squat'), SquatAnalyzer)

    @pytest.mark.parametrize("activity", FALLBACK_ACTIVITIES)
    def test_fallback_activities_use_standing(self, activity):
        assert get_analyzer(activity) is ANALYZER_REGISTRY[ActivityType.STANDING]

    def test_missing_default_is_restored(self):
        dispatcher = FrameDispatcher(registry={ActivityType.CLIMBING: ClimbingAnalyzer()})
        assert isinstance(dispatcher.get_analyzer(ActivityType.RUNNING), StandingAnalyzer)

    def test_caller_registry_left_unchanged(self):
        registry = {ActivityType.CLIMBING: ClimbingAnalyzer()}
        dispatcher = FrameDispatcher(registry=registry)
        assert list(registry) == [ActivityType.CLIMBING]
        assert ActivityType.STANDING in dispatcher.registry

    def test_built_registry_has_default(self):
        assert isinstance(build_registry()[DEFAULT_ACTIVITY], StandingAnalyzer)


class TestResolveActivity:
    def test_enum_passthrough(self):
        assert resolve_activity(ActivityType.WALKING) == ActivityType.WALKING

    def test_string(self):
        assert resolve_activity('arms_overhead') == ActivityType.ARMS_OVERHEAD

    def test_none_is_default(self):
        assert resolve_activity(None) == DEFAULT_ACTIVITY

    def test_unknown_string_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert resolve_activity('parkour') == DEFAULT_ACTIVITY
        assert 'parkour' in caplog.text


class TestAnalyzeFrame:
    @pytest.mark.parametrize("activity", FALLBACK_ACTIVITIES + ['parkour', None])
    def test_fallback_matches_standing(self, risky_pose, activity):
        expected = analyze_frame(risky_pose, 1.0, 30, ActivityType.STANDING)
        assert analyze_frame(risky_pose, 1.0, 30, activity) == expected

    def test_default_activity_is_standing(self, risky_pose):
        assert analyze_frame(risky_pose, 0.0, 0) == analyze_frame(risky_pose, 0.0, 0, ActivityType.STANDING)

    def test_idempotent(self, risky_pose):
        first = analyze_frame(risky_pose, 0.2, 6, ActivityType.CLIMBING)
        second = analyze_frame(risky_pose, 0.2, 6, ActivityType.CLIMBING)
        assert first == second

    def test_activity_changes_rules(self, risky_pose):
        standing = analyze_frame(risky_pose, 0.0, 0, ActivityType.STANDING)
        squat = analyze_frame(risky_pose, 0.0, 0, ActivityType.SQUAT)
        assert 'head_lateral_shift' in standing.issues
        assert 'left_knee_valgus' in squat.issues


class TestAnalyzeSequence:
    def test_timestamps_from_fps(self, risky_pose):
        records = FrameDispatcher().analyze_sequence([risky_pose] * 4, ActivityType.WALKING)
        assert [r.frame_index for r in records] == [0, 1, 2, 3]
        assert [r.timestamp for r in records] == pytest.approx([0.0, 1 / 30, 2 / 30, 3 / 30])

    def test_custom_sampling(self, risky_pose):
        records = FrameDispatcher(sampling=SamplingConfig(FPS=10.0)).analyze_sequence([risky_pose] * 3)
        assert records[2].timestamp == pytest.approx(0.2)

    def test_matches_single_frame_calls(self, risky_pose):
        neutral = build_pose()
        poses = [neutral, risky_pose, neutral]
        records = FrameDispatcher().analyze_sequence(poses, ActivityType.CLIMBING)
        for i, (pose, record) in enumerate(zip(poses, records)):
            assert record == analyze_frame(pose, i / 30, i, ActivityType.CLIMBING)

    def test_empty(self):
        assert FrameDispatcher().analyze_sequence([]) == []
