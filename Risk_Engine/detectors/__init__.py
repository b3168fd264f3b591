"""MediaPipe detection wrapper."""
from .pose_detector import PoseDetector
