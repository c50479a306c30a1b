"""Answer synthesis."""

from .models import Answer, AnswerOptions, AnswerSource, AnswerType
from .synthesizer import NOT_FOUND_MARKER, AnswerSynthesizer

__all__ = [
    "NOT_FOUND_MARKER",
    "Answer",
    "AnswerOptions",
    "AnswerSource",
    "AnswerSynthesizer",
    "AnswerType",
]
