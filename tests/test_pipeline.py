"""Video session pipeline tests (detector and video reader replaced by fakes)."""

import json

import numpy as np
import pytest

from conftest import build_pose
from Risk_Engine.core.actions import ActionConfig, ActivityType, ExperienceLevel
from Risk_Engine.core.frame_risk import RiskLevel
from Risk_Engine.pipeline import video_session
from Risk_Engine.pipeline.video_session import (
    SessionResult, analyze_landmark_frames, extract_landmark_frames, iter_video_frames, run_video_session,
)

VALGUS_POSE = {'LEFT_KNEE': (0.40, 0.80)}


class FakeDetector:
    """Returns a pose for every frame except those listed in misses."""

    def __init__(self, pose, misses=()):
        self.pose = pose
        self.misses = set(misses)
        self.calls = []
        self.closed = False

    def detect(self, frame, timestamp_ms):
        self.calls.append(timestamp_ms)
        if len(self.calls) - 1 in self.misses:
            return None
        return self.pose

    def close(self):
        self.closed = True


@pytest.fixture
def fake_video(monkeypatch):
    """Ten blank frames sampled every 100 ms."""
    frames = [(i * 100.0, np.zeros((4, 4, 3), dtype=np.uint8)) for i in range(10)]
    monkeypatch.setattr(video_session, 'iter_video_frames', lambda path, fps=30.0: iter(frames))
    monkeypatch.setattr(video_session, 'video_duration_ms', lambda path: 1000.0)
    return frames


class TestAnalyzeLandmarkFrames:
    def test_climbing_session(self):
        poses = [build_pose(VALGUS_POSE)] * 8
        result = analyze_landmark_frames(poses, ActionConfig(activity_type=ActivityType.CLIMBING), "Alex")
        assert isinstance(result, SessionResult)
        assert len(result.records) == 8
        assert result.summary.overall_risk == RiskLevel.HIGH
        assert result.summary.secondary_risk == RiskLevel.MEDIUM
        assert "Alex" in result.message
        assert result.records[3].timestamp == pytest.approx(0.1)

    def test_default_config_is_standing(self):
        result = analyze_landmark_frames([build_pose()] * 3)
        assert result.summary.activity_type == ActivityType.STANDING
        assert result.summary.overall_risk == RiskLevel.LOW

    def test_experience_level_does_not_change_analysis(self):
        poses = [build_pose(VALGUS_POSE), build_pose()] * 4
        base = analyze_landmark_frames(poses, ActionConfig(activity_type=ActivityType.CLIMBING))
        pro = analyze_landmark_frames(poses, ActionConfig(activity_type=ActivityType.CLIMBING,
                                                          experience_level=ExperienceLevel.ADVANCED))
        assert base.records == pro.records
        assert base.summary.overall_risk == pro.summary.overall_risk
        assert pro.config.experience_level == ExperienceLevel.ADVANCED

    def test_empty(self):
        result = analyze_landmark_frames([])
        assert result.records == ()
        assert result.summary.frame_count == 0

    def test_to_dict_is_json_serializable(self):
        result = analyze_landmark_frames([build_pose(VALGUS_POSE)] * 2,
                                         ActionConfig(activity_type=ActivityType.SQUAT))
        data = json.loads(json.dumps(result.to_dict()))
        assert data['config']['type'] == 'squat'
        assert data['config']['category'] == 'basic_posture'
        assert data['frames'][0]['issues'] == ['left_knee_valgus']


class TestExtraction:
    def test_drops_missed_frames(self, fake_video):
        detector = FakeDetector(build_pose(), misses={2, 5})
        poses = extract_landmark_frames('clip.mp4', detector)
        assert len(poses) == 8
        assert detector.calls == [t for t, _ in fake_video]

    def test_progress_reaches_100(self, fake_video):
        progress = []
        extract_landmark_frames('clip.mp4', FakeDetector(build_pose()), progress_callback=progress.append)
        assert progress[-1] == 100
        assert progress == sorted(progress)
        assert max(progress[:-1]) <= 99

    def test_run_video_session_closes_detector(self, fake_video):
        detector = FakeDetector(build_pose(VALGUS_POSE))
        result = run_video_session('clip.mp4', ActionConfig(activity_type=ActivityType.SQUAT),
                                   detector_factory=lambda: detector)
        assert detector.closed
        assert len(result.records) == 10
        assert result.summary.overall_risk == RiskLevel.LOW
        assert len(result.summary.key_moments) == 10

    def test_unreadable_video(self, tmp_path):
        with pytest.raises(IOError):
            list(iter_video_frames(tmp_path / 'missing.mp4'))
