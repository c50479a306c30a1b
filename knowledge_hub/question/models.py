"""Question processing models and data structures."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class QuestionType(str, Enum):
    """Kinds of questions the classifier distinguishes."""

    TECHNICAL = "technical"
    CONCEPTUAL = "conceptual"
    TROUBLESHOOTING = "troubleshooting"
    HOWTO = "howto"
    COMPARISON = "comparison"
    PRICING = "pricing"
    SECURITY = "security"
    PERFORMANCE = "performance"
    INTEGRATION = "integration"


class QuestionComplexity(str, Enum):
    """Complexity tiers used to size the search."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class QuestionIntent(str, Enum):
    """What the user is trying to achieve."""

    LEARN = "learn"
    IMPLEMENT = "implement"
    TROUBLESHOOT = "troubleshoot"
    COMPARE = "compare"
    OPTIMIZE = "optimize"
    MIGRATE = "migrate"
    SECURE = "secure"
    COST = "cost"
    MONITOR = "monitor"


class ChangeType(str, Enum):
    """Kinds of edits the normalizer records."""

    SPELLING = "spelling"
    ABBREVIATION = "abbreviation"
    CASE = "case"
    PUNCTUATION = "punctuation"
    WHITESPACE = "whitespace"


@dataclass
class QuestionMetadata:
    """Where a question came from."""

    user_agent: str | None = None
    origin: str | None = None
    source: str = "api"
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Question:
    """A user question. Never mutated after creation."""

    id: str
    session_id: str | None
    original_text: str
    normalized_text: str
    language: str
    timestamp: datetime
    metadata: QuestionMetadata


@dataclass(frozen=True)
class ValidationIssue:
    """A validation error."""

    code: str
    message: str
    severity: str = "error"


@dataclass(frozen=True)
class ValidationWarning:
    """A non-blocking validation finding."""

    code: str
    message: str
    suggestion: str | None = None


@dataclass
class ValidationResult:
    """Outcome of question validation."""

    is_valid: bool
    is_aws_related: bool
    has_minimum_length: bool
    has_maximum_length: bool
    contains_offensive_content: bool
    language: str = "en"
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def first_error(self) -> ValidationIssue | None:
        return self.errors[0] if self.errors else None


@dataclass(frozen=True)
class NormalizationChange:
    """One edit applied by the normalizer."""

    type: ChangeType
    original: str
    normalized: str
    position: int


@dataclass
class NormalizationResult:
    """Outcome of question normalization."""

    original: str
    normalized: str
    changes: list[NormalizationChange] = field(default_factory=list)


@dataclass(frozen=True)
class ServiceReference:
    """An AWS service mentioned in a question."""

    service_name: str
    service_code: str
    category: str
    confidence: float
    context: str


@dataclass(frozen=True)
class ExtractedEntity:
    """A non-service entity found in a question (region, instance type, ...)."""

    type: str
    value: str
    start: int
    end: int
    confidence: float


@dataclass
class QuestionAnalysis:
    """Classifier output for a normalized question."""

    question_type: QuestionType
    complexity: QuestionComplexity
    intent: QuestionIntent
    aws_services: list[ServiceReference]
    entities: list[ExtractedEntity]
    confidence: float
    suggested_topics: list[str]
    type_scores: dict[str, int] = field(default_factory=dict)
    question_id: str | None = None

    @property
    def service_names(self) -> list[str]:
        return [service.service_name for service in self.aws_services]


@dataclass(frozen=True)
class QuestionSuggestion:
    """Hint shown to the user to improve a question."""

    type: str
    text: str
    confidence: float
    reason: str


@dataclass
class ProcessedQuestion:
    """Result of running validation, normalization and analysis."""

    question: Question
    validation: ValidationResult
    normalization: NormalizationResult
    analysis: QuestionAnalysis
    suggestions: list[QuestionSuggestion]
    processing_time_ms: float
    success: bool
    error: str | None = None
