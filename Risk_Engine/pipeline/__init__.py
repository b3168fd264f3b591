"""Video-to-session pipeline."""
from .video_session import SessionResult, analyze_landmark_frames, extract_landmark_frames, run_video_session
