"""
Pose Detector Module
MediaPipe Pose Landmarker wrapper producing full 33-point landmark sets.
Uses the MediaPipe Tasks API (0.10+). Only landmarks leave the detector;
frames are never stored.
"""

import logging
import numpy as np
import cv2
from pathlib import Path
from typing import Optional
import urllib.request
import ssl
import certifi

# MediaPipe Tasks API
import mediapipe as mp
from mediapipe.tasks import python as mp_python
from mediapipe.tasks.python import vision

from ..core.landmarks import LandmarkSet, Point2D, POSE_LANDMARK_COUNT

logger = logging.getLogger(__name__)


class PoseDetector:
    """MediaPipe Pose Landmarker in VIDEO mode. Use as a context manager."""

    MODEL_URLS = {
        0: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_lite/float16/latest/pose_landmarker_lite.task",
        1: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_full/float16/latest/pose_landmarker_full.task",
        2: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_heavy/float16/latest/pose_landmarker_heavy.task",
    }
    MODEL_DIR = Path(__file__).parent.parent.parent / "models"

    def __init__(self, min_detection_confidence: float = 0.5,
                 min_tracking_confidence: float = 0.5, model_complexity: int = 1):
        """
        Args:
            min_detection_confidence: Minimum confidence for detection
            min_tracking_confidence: Minimum confidence for tracking
            model_complexity: 0=Lite, 1=Full, 2=Heavy
        """
        if model_complexity not in self.MODEL_URLS:
            raise ValueError(f"model_complexity must be 0, 1 or 2, got {model_complexity}")
        self.model_url = self.MODEL_URLS[model_complexity]
        self.model_path = self.MODEL_DIR / self.model_url.rsplit('/', 1)[-1]
        self._ensure_model()

        base_options = mp_python.BaseOptions(model_asset_path=str(self.model_path))
        options = vision.PoseLandmarkerOptions(
            base_options=base_options,
            running_mode=vision.RunningMode.VIDEO,
            num_poses=1,
            min_pose_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
            output_segmentation_masks=False
        )

        self.landmarker = vision.PoseLandmarker.create_from_options(options)
        self._detection_count = 0
        self._last_timestamp_ms = -1
        logger.info(f"PoseDetector initialized ({self.model_path.name})")

    def _ensure_model(self):
        """Download model if not present."""
        if self.model_path.exists():
            return

        logger.info(f"Downloading pose model to {self.model_path}")
        self.model_path.parent.mkdir(parents=True, exist_ok=True)
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        try:
            with urllib.request.urlopen(self.model_url, context=ssl_context) as response:
                with open(self.model_path, 'wb') as f:
                    f.write(response.read())
        except OSError as e:
            raise RuntimeError(f"Failed to download model: {e}\n"
                               f"Please manually download from:\n{self.model_url}\n"
                               f"And save to: {self.model_path}") from e

    def detect(self, frame: np.ndarray, timestamp_ms: float) -> Optional[LandmarkSet]:
        """Landmarks of the first detected person in a BGR frame, or None."""
        rgb_frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)

        # MediaPipe requires strictly increasing timestamps
        ts = int(timestamp_ms)
        if ts <= self._last_timestamp_ms:
            ts = self._last_timestamp_ms + 1
        self._last_timestamp_ms = ts

        result = self.landmarker.detect_for_video(mp_image, ts)
        if not result.pose_landmarks:
            return None

        landmarks = result.pose_landmarks[0]
        if len(landmarks) != POSE_LANDMARK_COUNT:
            logger.warning(f"Unexpected landmark count {len(landmarks)} at {ts} ms, frame skipped")
            return None

        self._detection_count += 1
        return LandmarkSet([
            Point2D(lm.x, lm.y, lm.z, getattr(lm, 'visibility', None))
            for lm in landmarks
        ])

    @property
    def detection_count(self) -> int:
        return self._detection_count

    def close(self):
        """Release resources."""
        if hasattr(self, 'landmarker'):
            self.landmarker.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
