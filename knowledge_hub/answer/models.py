"""Answer models and data structures."""

from dataclasses import dataclass, field
from enum import Enum


class AnswerType(str, Enum):
    """Shape of the generated answer body."""

    HOWTO = "howto"
    CONCEPTUAL = "conceptual"
    TROUBLESHOOTING = "troubleshooting"
    COMPARISON = "comparison"
    REFERENCE = "reference"
    NOT_FOUND = "not_found"


@dataclass
class AnswerOptions:
    """Options for answer generation."""

    max_sources: int = 5
    min_score: float = 0.1
    include_code_examples: bool = True
    include_steps: bool = True
    max_length: int = 4000


@dataclass(frozen=True)
class AnswerSource:
    """Documentation page an answer is based on."""

    url: str
    title: str
    score: float


@dataclass
class Answer:
    """An answer synthesized from ranked documentation."""

    answer_id: str
    question_id: str | None
    text: str
    sources: list[AnswerSource]
    confidence: float
    processing_time_ms: float
    answer_type: AnswerType
    suggestions: list[str] = field(default_factory=list)
    has_code_examples: bool = False
    has_steps: bool = False
    word_count: int = 0
    truncated: bool = False
