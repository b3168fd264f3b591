"""
Overlay Renderer

Draws the skeleton in the frame's risk color, the hip-ankle reference line
with the knee's projection onto it, and an issues panel. Uses OpenCV.
"""

import sys
from pathlib import Path
import cv2
import numpy as np
from typing import Optional, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent.parent))
from Risk_Engine.core.frame_risk import FrameRiskRecord, RiskLevel
from Risk_Engine.core.geometry import project_point_on_line
from Risk_Engine.core.landmarks import LANDMARKS, LandmarkSet, Point2D

SKELETON_EDGES = [
    ('LEFT_SHOULDER', 'RIGHT_SHOULDER'), ('LEFT_HIP', 'RIGHT_HIP'),
    ('LEFT_SHOULDER', 'LEFT_HIP'), ('RIGHT_SHOULDER', 'RIGHT_HIP'),
    ('LEFT_SHOULDER', 'LEFT_ELBOW'), ('LEFT_ELBOW', 'LEFT_WRIST'),
    ('RIGHT_SHOULDER', 'RIGHT_ELBOW'), ('RIGHT_ELBOW', 'RIGHT_WRIST'),
    ('LEFT_HIP', 'LEFT_KNEE'), ('LEFT_KNEE', 'LEFT_ANKLE'),
    ('RIGHT_HIP', 'RIGHT_KNEE'), ('RIGHT_KNEE', 'RIGHT_ANKLE'),
    ('LEFT_ANKLE', 'LEFT_HEEL'), ('LEFT_HEEL', 'LEFT_FOOT_INDEX'),
    ('RIGHT_ANKLE', 'RIGHT_HEEL'), ('RIGHT_HEEL', 'RIGHT_FOOT_INDEX'),
]


class OverlayRenderer:
    """OpenCV overlay renderer for frame risk visualization."""

    COLORS = {
        'low': (136, 255, 0), 'medium': (0, 165, 255), 'high': (0, 0, 255),
        'joint': (255, 212, 0), 'reference': (0, 255, 0), 'text_bg': (30, 30, 30),
        'text': (255, 255, 255), 'accent': (255, 0, 212)
    }

    def __init__(self, show_skeleton: bool = True, show_reference: bool = True, show_issues: bool = True):
        self.show_skeleton = show_skeleton
        self.show_reference = show_reference
        self.show_issues = show_issues

    def render(self, frame: np.ndarray, landmarks: LandmarkSet,
               record: Optional[FrameRiskRecord] = None) -> np.ndarray:
        output = frame.copy()
        h, w = output.shape[:2]
        color = self._get_color(record.risk_level if record else RiskLevel.LOW)

        if self.show_skeleton:
            self._draw_skeleton(output, landmarks, color, w, h)
        if self.show_reference:
            for side in ('LEFT', 'RIGHT'):
                self._draw_leg_reference(output, landmarks, side, w, h)
        if self.show_issues and record is not None:
            self._draw_issues(output, record, color, w)
        return output

    @staticmethod
    def _to_px(p: Point2D, w: int, h: int) -> Tuple[int, int]:
        return (int(p.x * w), int(p.y * h))

    def _draw_skeleton(self, frame, landmarks, color, w, h):
        for a, b in SKELETON_EDGES:
            pa, pb = landmarks.get(LANDMARKS[a]), landmarks.get(LANDMARKS[b])
            if pa is None or pb is None:
                continue
            cv2.line(frame, self._to_px(pa, w, h), self._to_px(pb, w, h), color, 3)
        for index in LANDMARKS.values():
            p = landmarks.get(index)
            if p is not None:
                cv2.circle(frame, self._to_px(p, w, h), 5, self.COLORS['joint'], -1)

    def _draw_leg_reference(self, frame, landmarks, side, w, h):
        """Hip-ankle line and the knee's deviation from it."""
        hip = landmarks.get(LANDMARKS[f'{side}_HIP'])
        knee = landmarks.get(LANDMARKS[f'{side}_KNEE'])
        ankle = landmarks.get(LANDMARKS[f'{side}_ANKLE'])
        if hip is None or knee is None or ankle is None or (hip.x, hip.y) == (ankle.x, ankle.y):
            return
        foot = project_point_on_line(knee, hip, ankle)
        cv2.line(frame, self._to_px(hip, w, h), self._to_px(ankle, w, h), self.COLORS['reference'], 1)
        cv2.line(frame, self._to_px(knee, w, h), self._to_px(foot, w, h), self.COLORS['accent'], 2)

    def _draw_issues(self, frame, record, color, w):
        lines = [f"{record.risk_level.value.upper()} ({record.risk_score})"]
        lines += [issue.replace('_', ' ') for issue in record.issues]
        panel_w, panel_h = 230, 20 + 20 * len(lines)
        x, y = max(0, w - panel_w - 10), 10

        overlay = frame.copy()
        cv2.rectangle(overlay, (x, y), (x + panel_w, y + panel_h), self.COLORS['text_bg'], -1)
        cv2.addWeighted(overlay, 0.8, frame, 0.2, 0, frame)
        cv2.rectangle(frame, (x, y), (x + panel_w, y + panel_h), color, 1)

        for i, text in enumerate(lines):
            text_color = color if i == 0 else self.COLORS['text']
            cv2.putText(frame, text, (x + 10, y + 25 + 20 * i), cv2.FONT_HERSHEY_SIMPLEX, 0.45, text_color, 1)
        cv2.putText(frame, f"t={record.timestamp:.2f}s", (10, 20),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, self.COLORS['text'], 1)

    def _get_color(self, level: RiskLevel):
        return self.COLORS[level.value]
