"""Risk classification engine."""
from .landmarks import LANDMARKS, LandmarkSet, MalformedLandmarksError, Point2D
from .geometry import calculate_angle, knee_valgus_offset, midpoint, project_point_on_line, q_angle
from .frame_risk import DominantLoad, FrameRiskRecord, RiskLevel
from .actions import ActionCategory, ActionConfig, ActivityType, CameraAngle, ExperienceLevel
from .analyzers import FrameAnalyzer
from .dispatcher import ANALYZER_REGISTRY, FrameDispatcher, analyze_frame, get_analyzer
from .session import SessionSummary, summarize_analysis
