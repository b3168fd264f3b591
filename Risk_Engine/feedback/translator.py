"""
Feedback Translator
Turns a session summary into a coaching message in plain body language.

Matching is by substring on the first issue of the first key moment, so issue
tag names are part of the contract: any tag containing "valgus" gets the knee
message and any tag containing "instability" gets the ankle message.
"""

from typing import Optional

from ..core.frame_risk import RiskLevel
from ..core.session import SessionSummary

DEFAULT_USER_NAME = 'Climber'

STABLE_MESSAGE = (
    "Great flow, {name}. Your muscles are actively stabilizing your joints, keeping the load "
    "off your ligaments. Keep engaging those glutes!"
)

KNEE_VALGUS_MESSAGE = (
    "Deep breaths, {name}. We noticed your knee drifting inward during big moves. \n\n"
    "This usually means your ligaments are hanging on to keep you stable, rather than your hip "
    "muscles. \n\n"
    "Tip: Visualize 'screwing' your foot into the wall to activate your outer hip muscles."
)

ANKLE_INSTABILITY_MESSAGE = (
    "You're pushing hard! We saw some wobbles in the ankle. \n\n"
    "When the ankle isn't locked, the knee has to compensate. \n\n"
    "Try to keep your heel lower to engage the calf muscles for stability."
)

HIGH_TENSION_MESSAGE = (
    "We see you working hard on the wall. \n\n"
    "There are moments of high tension in the joints. Focus on smooth, controlled breathing to "
    "help your muscles relax and engage at the right time."
)


def translate_to_feedback(summary: SessionSummary, user_name: Optional[str] = DEFAULT_USER_NAME) -> str:
    """Pick the coaching message for a session. No severity re-ranking of issues."""
    name = user_name or DEFAULT_USER_NAME
    if summary.overall_risk == RiskLevel.LOW:
        return STABLE_MESSAGE.format(name=name)

    main_issue = summary.dominant_issue or ''
    if 'valgus' in main_issue:
        return KNEE_VALGUS_MESSAGE.format(name=name)
    if 'instability' in main_issue:
        return ANKLE_INSTABILITY_MESSAGE
    return HIGH_TENSION_MESSAGE
