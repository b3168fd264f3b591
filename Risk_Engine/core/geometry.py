"""
Geometric Primitives
Angles, projections and the knee valgus offset on normalized 2D landmarks.
"""

import numpy as np

from .landmarks import Point2D


def calculate_angle(a: Point2D, b: Point2D, c: Point2D) -> float:
    """Interior angle at b formed by b->a and b->c, in degrees [0, 180]."""
    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = abs(np.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return float(angle)


def project_point_on_line(p: Point2D, a: Point2D, b: Point2D) -> Point2D:
    """
    Orthogonal projection of p onto the infinite line through a and b.

    a and b must be distinct; a == b raises ZeroDivisionError.
    """
    ab_x, ab_y = b.x - a.x, b.y - a.y
    ap_x, ap_y = p.x - a.x, p.y - a.y
    t = (ap_x * ab_x + ap_y * ab_y) / (ab_x * ab_x + ab_y * ab_y)
    return Point2D(a.x + ab_x * t, a.y + ab_y * t)


def knee_valgus_offset(hip: Point2D, knee: Point2D, ankle: Point2D) -> float:
    """
    Signed perpendicular distance of the knee from the hip-ankle line,
    normalized by leg length (scale invariant).

    The sign only tells which side of the line the knee sits on; it is not
    anatomically signed per leg. Callers apply their own per-leg convention.
    """
    ha_x, ha_y = ankle.x - hip.x, ankle.y - hip.y
    hk_x, hk_y = knee.x - hip.x, knee.y - hip.y

    leg_length = np.hypot(ha_x, ha_y)
    if leg_length == 0:
        return 0.0

    cross = ha_x * hk_y - ha_y * hk_x
    return float(cross / leg_length ** 2)


def q_angle(hip: Point2D, knee: Point2D, ankle: Point2D) -> float:
    """Angle between the hip->knee and knee->ankle vectors (0 for a straight leg)."""
    return 180.0 - calculate_angle(hip, knee, ankle)


def midpoint(a: Point2D, b: Point2D) -> Point2D:
    return Point2D((a.x + b.x) / 2, (a.y + b.y) / 2)
