"""
Action Types
Supported activities, their categories and the per-session action config.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Dict, Any, List


class ActionCategory(Enum):
    BASIC_POSTURE = "basic_posture"
    ROUTINE = "routine"
    PROFESSIONAL = "professional"


class ActivityType(Enum):
    """Closed set of activities. Each selects exactly one frame analyzer."""
    # Basic posture
    STANDING = "standing"
    SINGLE_LEG_STANDING = "single_leg_standing"
    WALKING = "walking"
    SQUAT = "squat"
    ARMS_OVERHEAD = "arms_overhead"
    # Routine
    SQUAT_EXERCISE = "squat_exercise"
    RUNNING = "running"
    STRENGTH = "strength"
    # Professional
    CLIMBING = "climbing"
    VOLLEYBALL = "volleyball"
    MARTIAL_ARTS = "martial_arts"

    @property
    def category(self) -> ActionCategory:
        return _CATEGORY_BY_ACTIVITY[self]

    @property
    def label(self) -> str:
        return self.value.replace('_', ' ').title()

    @classmethod
    def by_category(cls, category: ActionCategory) -> List['ActivityType']:
        return [a for a in cls if a.category == category]


_CATEGORY_BY_ACTIVITY = {
    ActivityType.STANDING: ActionCategory.BASIC_POSTURE,
    ActivityType.SINGLE_LEG_STANDING: ActionCategory.BASIC_POSTURE,
    ActivityType.WALKING: ActionCategory.BASIC_POSTURE,
    ActivityType.SQUAT: ActionCategory.BASIC_POSTURE,
    ActivityType.ARMS_OVERHEAD: ActionCategory.BASIC_POSTURE,
    ActivityType.SQUAT_EXERCISE: ActionCategory.ROUTINE,
    ActivityType.RUNNING: ActionCategory.ROUTINE,
    ActivityType.STRENGTH: ActionCategory.ROUTINE,
    ActivityType.CLIMBING: ActionCategory.PROFESSIONAL,
    ActivityType.VOLLEYBALL: ActionCategory.PROFESSIONAL,
    ActivityType.MARTIAL_ARTS: ActionCategory.PROFESSIONAL,
}


class CameraAngle(Enum):
    FRONT = "front"
    SIDE = "side"


class ExperienceLevel(Enum):
    """Professional-activity experience. Accepted but not read by any analyzer yet."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class ActionConfig:
    """
    Caller-supplied session parameters.

    Only activity_type changes analysis. experience_level is carried through
    to the session result so thresholds can later be tuned per level; it is
    currently a documented no-op.
    """
    activity_type: ActivityType = ActivityType.STANDING
    angle: CameraAngle = CameraAngle.FRONT
    duration: Optional[float] = None
    experience_level: Optional[ExperienceLevel] = None

    @property
    def category(self) -> ActionCategory:
        return self.activity_type.category

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.activity_type.value,
            'category': self.category.value,
            'angle': self.angle.value,
            'duration': self.duration,
            'experience_level': self.experience_level.value if self.experience_level else None,
        }
