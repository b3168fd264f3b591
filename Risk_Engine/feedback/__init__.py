"""Session feedback translation."""
from .translator import translate_to_feedback
