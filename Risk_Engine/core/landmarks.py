"""
Landmark Model
Point and landmark-set value types for the MediaPipe Pose 33-point layout.
Coordinates are normalized to [0, 1] relative to the frame; z is relative
depth and visibility is detection confidence.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple, Sequence, Iterator, Union

# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

POSE_LANDMARK_COUNT = 33

# MediaPipe Pose landmark indices (the 17 used by the analyzers)
LANDMARKS = {
    'NOSE': 0,
    'LEFT_SHOULDER': 11,
    'RIGHT_SHOULDER': 12,
    'LEFT_ELBOW': 13,
    'RIGHT_ELBOW': 14,
    'LEFT_WRIST': 15,
    'RIGHT_WRIST': 16,
    'LEFT_HIP': 23,
    'RIGHT_HIP': 24,
    'LEFT_KNEE': 25,
    'RIGHT_KNEE': 26,
    'LEFT_ANKLE': 27,
    'RIGHT_ANKLE': 28,
    'LEFT_HEEL': 29,
    'RIGHT_HEEL': 30,
    'LEFT_FOOT_INDEX': 31,
    'RIGHT_FOOT_INDEX': 32,
}


class MalformedLandmarksError(ValueError):
    """Raised when a landmark set does not have the fixed upstream shape."""


# -----------------------------------------------------------------------------
# Data Classes
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Point2D:
    """Single normalized landmark. Missing visibility means assume visible."""
    x: float
    y: float
    z: Optional[float] = None
    visibility: Optional[float] = None

    @classmethod
    def from_tuple(cls, values: Sequence[float]) -> 'Point2D':
        """Build from (x, y[, z[, visibility]])."""
        if not 2 <= len(values) <= 4:
            raise MalformedLandmarksError(f"Expected 2-4 values per landmark, got {len(values)}")
        try:
            x, y = float(values[0]), float(values[1])
            z = float(values[2]) if len(values) > 2 else None
            visibility = float(values[3]) if len(values) > 3 else None
        except (TypeError, ValueError) as e:
            raise MalformedLandmarksError(f"Non-numeric landmark values: {values!r}") from e
        return cls(x, y, z, visibility)

    def is_visible(self, min_visibility: float) -> bool:
        return self.visibility is None or self.visibility > min_visibility

    def to_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y,
                self.z if self.z is not None else 0.0,
                self.visibility if self.visibility is not None else 1.0)


PointLike = Union[Point2D, Sequence[float], None]


class LandmarkSet:
    """
    Immutable 33-slot landmark sequence for one frame.

    Slots may be None when the upstream detector did not report that landmark;
    analyzers skip any rule whose landmarks are missing.
    """

    def __init__(self, points: Sequence[PointLike]):
        if len(points) != POSE_LANDMARK_COUNT:
            raise MalformedLandmarksError(
                f"Expected {POSE_LANDMARK_COUNT} landmarks, got {len(points)}"
            )
        self._points: Tuple[Optional[Point2D], ...] = tuple(self._coerce(p) for p in points)

    @staticmethod
    def _coerce(point: PointLike) -> Optional[Point2D]:
        if point is None or isinstance(point, Point2D):
            return point
        if isinstance(point, (tuple, list, np.ndarray)):
            coerced = Point2D.from_tuple(point)
            if math.isnan(coerced.x) or math.isnan(coerced.y):
                return None
            return coerced
        raise MalformedLandmarksError(f"Unsupported landmark entry: {point!r}")

    @classmethod
    def from_points(cls, points: dict) -> 'LandmarkSet':
        """Sparse construction from {index: point}; every other slot is missing."""
        slots = [None] * POSE_LANDMARK_COUNT
        for index, point in points.items():
            if not 0 <= index < POSE_LANDMARK_COUNT:
                raise MalformedLandmarksError(f"Landmark index out of range: {index}")
            slots[index] = point
        return cls(slots)

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'LandmarkSet':
        """Build from a (33, 2..4) array. NaN x or y marks a missing landmark."""
        array = np.asarray(array, dtype=float)
        if array.ndim != 2 or array.shape[0] != POSE_LANDMARK_COUNT or not 2 <= array.shape[1] <= 4:
            raise MalformedLandmarksError(
                f"Expected array of shape ({POSE_LANDMARK_COUNT}, 2-4), got {array.shape}"
            )
        return cls([row for row in array])

    def to_array(self) -> np.ndarray:
        """(33, 4) array of x, y, z, visibility; missing landmarks are NaN rows."""
        out = np.full((POSE_LANDMARK_COUNT, 4), np.nan)
        for i, p in enumerate(self._points):
            if p is not None:
                out[i] = p.to_tuple()
        return out

    def get(self, index: int) -> Optional[Point2D]:
        return self._points[index]

    def get_visible(self, index: int, min_visibility: float) -> Optional[Point2D]:
        """Landmark only if present and confident enough."""
        point = self._points[index]
        if point is None or not point.is_visible(min_visibility):
            return None
        return point

    def __getitem__(self, index: int) -> Optional[Point2D]:
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Optional[Point2D]]:
        return iter(self._points)

    def __eq__(self, other) -> bool:
        return isinstance(other, LandmarkSet) and self._points == other._points

    def __hash__(self) -> int:
        return hash(self._points)

    def __repr__(self) -> str:
        present = sum(1 for p in self._points if p is not None)
        return f"LandmarkSet({present}/{POSE_LANDMARK_COUNT} present)"
