"""
Risk Engine
Per-frame biomechanical risk classification, session aggregation and feedback.
"""

from .core.actions import ActionConfig, ActivityType, ExperienceLevel
from .core.dispatcher import FrameDispatcher, analyze_frame
from .core.frame_risk import FrameRiskRecord, RiskLevel
from .core.landmarks import LandmarkSet, Point2D
from .core.session import SessionSummary, summarize_analysis
from .feedback.translator import translate_to_feedback
from .pipeline.video_session import SessionResult, analyze_landmark_frames, run_video_session

# MediaPipe detector (import when needed)
# from .detectors.pose_detector import PoseDetector
