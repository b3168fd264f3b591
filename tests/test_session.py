"""Session aggregation tests."""

import json

import pytest

from Clinical_Research.risk_thresholds import (
    RiskBands, SessionThresholds, get_secondary_risk_level, get_session_risk_level,
)
from Risk_Engine.core.actions import ActivityType
from Risk_Engine.core.frame_risk import ClimbingDiagnostics, FrameRiskRecord, RiskLevel
from Risk_Engine.core.session import SESSION_FEEDBACK, count_issues, summarize_analysis

BANDS = RiskBands(high=3, medium=2)
SCORES = {'low': 0, 'medium': 2, 'high': 3}


def frames_from(levels, issues=()):
    """One record per level string, in order."""
    return [
        FrameRiskRecord(frame_index=i, timestamp=i / 30, risk_score=SCORES[level], bands=BANDS,
                        issues=tuple(issues) if level != 'low' else ())
        for i, level in enumerate(levels)
    ]


class TestSessionThresholds:
    def test_counts_are_strict(self):
        assert get_session_risk_level(5, 0) == "low"
        assert get_session_risk_level(6, 0) == "high"
        assert get_session_risk_level(0, 10) == "low"
        assert get_session_risk_level(0, 11) == "medium"

    def test_high_takes_precedence(self):
        assert get_session_risk_level(6, 50) == "high"

    def test_secondary_levels(self):
        assert get_secondary_risk_level(5) == "low"
        assert get_secondary_risk_level(6) == "medium"
        assert get_secondary_risk_level(11) == "high"

    def test_custom_thresholds(self):
        thresholds = SessionThresholds(HIGH_FRAME_COUNT=1, MEDIUM_FRAME_COUNT=1)
        assert get_session_risk_level(2, 0, thresholds) == "high"

    def test_bands(self):
        assert [BANDS.level_for(s) for s in range(5)] == ["low", "low", "medium", "high", "high"]
        assert BANDS.is_ligament_dominant(2)
        assert not BANDS.is_ligament_dominant(1)


class TestSummarizeAnalysis:
    def test_empty_session(self):
        summary = summarize_analysis([])
        assert summary.overall_risk == RiskLevel.LOW
        assert summary.key_moments == ()
        assert summary.feedback == SESSION_FEEDBACK[RiskLevel.LOW]
        assert summary.frame_count == 0
        assert summary.dominant_issue is None

    def test_six_high_frames(self):
        summary = summarize_analysis(frames_from(['high'] * 6))
        assert summary.overall_risk == RiskLevel.HIGH
        assert len(summary.key_moments) == 6
        assert summary.feedback == "Momentary high load on ligaments detected."

    def test_five_high_frames_stay_low_but_are_key_moments(self):
        summary = summarize_analysis(frames_from(['high'] * 5 + ['low'] * 100))
        assert summary.overall_risk == RiskLevel.LOW
        assert len(summary.key_moments) == 5
        assert all(f.risk_level == RiskLevel.HIGH for f in summary.key_moments)

    def test_eleven_medium_frames(self):
        summary = summarize_analysis(frames_from(['medium'] * 11))
        assert summary.overall_risk == RiskLevel.MEDIUM
        assert len(summary.key_moments) == 11
        assert summary.feedback == "Generally stable with some wobbles."

    def test_key_moments_prefer_high_in_input_order(self):
        levels = ['medium', 'high', 'low', 'medium', 'high', 'high']
        summary = summarize_analysis(frames_from(levels))
        assert [f.frame_index for f in summary.key_moments] == [1, 4, 5]

    def test_key_moments_are_input_records(self):
        frames = frames_from(['low', 'medium', 'low'])
        summary = summarize_analysis(frames)
        assert summary.key_moments == (frames[1],)
        assert summary.key_moments[0] is frames[1]

    def test_all_low_has_no_key_moments(self):
        summary = summarize_analysis(frames_from(['low'] * 20))
        assert summary.key_moments == ()
        assert not summary.needs_attention

    def test_activity_carried(self):
        assert summarize_analysis([], 'walking').activity_type == ActivityType.WALKING


class TestSecondaryIndicator:
    def test_only_for_climbing(self):
        frames = frames_from(['medium'] * 12, issues=['left_q_angle_severe'])
        assert summarize_analysis(frames, ActivityType.STANDING).secondary_risk is None
        assert summarize_analysis(frames, ActivityType.CLIMBING).secondary_risk == RiskLevel.HIGH

    @pytest.mark.parametrize("count, expected", [
        (0, RiskLevel.LOW), (5, RiskLevel.LOW), (6, RiskLevel.MEDIUM),
        (10, RiskLevel.MEDIUM), (11, RiskLevel.HIGH),
    ])
    def test_counts(self, count, expected):
        frames = frames_from(['medium'] * count, issues=['right_q_angle_elevated'])
        frames += frames_from(['medium'] * 3, issues=['head_forward'])
        assert summarize_analysis(frames, ActivityType.CLIMBING).secondary_risk == expected

    def test_independent_of_overall(self):
        # Q-angle tags on low frames still count toward the indicator
        frames = [
            FrameRiskRecord(frame_index=i, timestamp=0.0, risk_score=1, bands=BANDS,
                            issues=('left_q_angle_elevated',))
            for i in range(8)
        ]
        summary = summarize_analysis(frames, ActivityType.CLIMBING)
        assert summary.overall_risk == RiskLevel.LOW
        assert summary.secondary_risk == RiskLevel.MEDIUM


class TestSummaryContext:
    def test_issue_counts(self):
        frames = [
            FrameRiskRecord(0, 0.0, 3, BANDS, ('left_knee_valgus', 'head_forward')),
            FrameRiskRecord(1, 0.1, 2, BANDS, ('head_forward',)),
        ]
        assert count_issues(frames) == {'left_knee_valgus': 1, 'head_forward': 2}

    def test_dominant_issue(self):
        frames = frames_from(['low', 'high'], issues=['left_knee_valgus', 'head_forward'])
        assert summarize_analysis(frames).dominant_issue == 'left_knee_valgus'

    def test_diagnostic_stats(self):
        frames = [
            FrameRiskRecord(i, i / 30, 0, BANDS, (), ClimbingDiagnostics(left_q_angle=float(q)))
            for i, q in enumerate([10, 20, 30])
        ]
        stats = summarize_analysis(frames, ActivityType.CLIMBING).diagnostic_stats
        assert set(stats) == {'left_q_angle'}
        assert stats['left_q_angle'].mean == pytest.approx(20.0)
        assert stats['left_q_angle'].max == 30.0

    def test_to_dict_is_json_serializable(self):
        frames = frames_from(['high'] * 2, issues=['left_q_angle_severe'])
        data = summarize_analysis(frames, ActivityType.CLIMBING).to_dict()
        assert data['overall_risk'] == 'low'
        assert data['secondary_risk'] == 'low'
        assert len(data['key_moments']) == 2
        assert data['key_moments'][0]['dominant_load'] == 'ligament'
        json.dumps(data)
