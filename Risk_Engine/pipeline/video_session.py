"""
Video Session Pipeline

Steps through a video at a fixed sampling rate, collects landmark sets from a
pose detector, and runs the risk engine over the collected sequence.

Frames where no person is detected are dropped, so frame indices are positions
in the collected sequence and timestamps are index / fps, not the source
video's real timing.
"""

import logging
import cv2
import numpy as np
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple, Dict, Any, Union

from Clinical_Research.risk_thresholds import RISK_THRESHOLDS, SamplingConfig
from ..core.actions import ActionConfig
from ..core.dispatcher import FrameDispatcher
from ..core.frame_risk import FrameRiskRecord
from ..core.landmarks import LandmarkSet
from ..core.session import SessionSummary, summarize_analysis
from ..feedback.translator import translate_to_feedback

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class SessionResult:
    """Everything one analyzed session produces."""
    config: ActionConfig
    records: Tuple[FrameRiskRecord, ...]
    summary: SessionSummary
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'config': self.config.to_dict(),
            'summary': self.summary.to_dict(),
            'message': self.message,
            'frames': [r.to_dict() for r in self.records],
        }


# -----------------------------------------------------------------------------
# Video stepping
# -----------------------------------------------------------------------------

def iter_video_frames(video_path: Union[str, Path], fps: float = 30.0) -> Iterator[Tuple[float, np.ndarray]]:
    """
    Yield (time_ms, BGR frame) sampled every 1/fps seconds.

    Raises:
        IOError: the video cannot be opened
    """
    cap = cv2.VideoCapture(str(video_path))
    if not cap.isOpened():
        raise IOError(f"Cannot open video: {video_path}")

    try:
        native_fps = cap.get(cv2.CAP_PROP_FPS) or fps
        step_ms = 1000.0 / fps
        next_sample_ms = 0.0
        index = 0
        while True:
            ok, frame = cap.read()
            if not ok:
                break
            time_ms = index * 1000.0 / native_fps
            index += 1
            if time_ms + 1e-6 < next_sample_ms:
                continue
            yield time_ms, frame
            next_sample_ms += step_ms
    finally:
        cap.release()


def video_duration_ms(video_path: Union[str, Path]) -> float:
    cap = cv2.VideoCapture(str(video_path))
    try:
        native_fps = cap.get(cv2.CAP_PROP_FPS)
        if not native_fps:
            return 0.0
        return cap.get(cv2.CAP_PROP_FRAME_COUNT) / native_fps * 1000.0
    finally:
        cap.release()


def extract_landmark_frames(video_path: Union[str, Path], detector,
                            sampling: Optional[SamplingConfig] = None,
                            progress_callback: Optional[ProgressCallback] = None) -> List[LandmarkSet]:
    """
    Run the detector over a video.

    Args:
        video_path: Video file
        detector: Object with detect(frame, timestamp_ms) -> Optional[LandmarkSet]
        sampling: Sampling rate (default 30 fps)
        progress_callback: Called with 0-100 as frames are processed

    Returns:
        Landmark sets of frames where a person was found, in order
    """
    sampling = sampling or RISK_THRESHOLDS['sampling']
    duration_ms = video_duration_ms(video_path)
    results: List[LandmarkSet] = []
    sampled = 0

    for time_ms, frame in iter_video_frames(video_path, sampling.FPS):
        sampled += 1
        pose = detector.detect(frame, time_ms)
        if pose is not None:
            results.append(pose)
        if progress_callback is not None and duration_ms > 0:
            progress_callback(min(99, int(time_ms / duration_ms * 100)))

    if progress_callback is not None:
        progress_callback(100)
    logger.info(f"Extracted {len(results)} poses from {sampled} sampled frames of {video_path}")
    return results


# -----------------------------------------------------------------------------
# Session
# -----------------------------------------------------------------------------

def analyze_landmark_frames(poses: Sequence[LandmarkSet], config: ActionConfig = ActionConfig(),
                            user_name: Optional[str] = None,
                            sampling: Optional[SamplingConfig] = None) -> SessionResult:
    """Engine-only run over already collected landmark sets."""
    if config.experience_level is not None:
        # Accepted for future threshold tuning; analyzers do not read it yet
        logger.debug(f"Experience level {config.experience_level.value} carried, not applied")

    dispatcher = FrameDispatcher(sampling=sampling)
    records = dispatcher.analyze_sequence(poses, config.activity_type)
    summary = summarize_analysis(records, config.activity_type)
    message = translate_to_feedback(summary, user_name)
    return SessionResult(config=config, records=tuple(records), summary=summary, message=message)


def _default_detector():
    from ..detectors.pose_detector import PoseDetector
    return PoseDetector()


def run_video_session(video_path: Union[str, Path], config: ActionConfig = ActionConfig(),
                      user_name: Optional[str] = None,
                      detector_factory: Callable[[], Any] = _default_detector,
                      progress_callback: Optional[ProgressCallback] = None,
                      sampling: Optional[SamplingConfig] = None) -> SessionResult:
    """Detect landmarks in a video and analyze them as one session."""
    detector = detector_factory()
    try:
        poses = extract_landmark_frames(video_path, detector, sampling, progress_callback)
    finally:
        if hasattr(detector, 'close'):
            detector.close()
    return analyze_landmark_frames(poses, config, user_name, sampling)
