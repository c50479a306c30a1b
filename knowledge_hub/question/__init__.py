"""Question validation, normalization and analysis."""

from .classifier import ClassifierConfig, QuestionClassifier
from .engine import QuestionEngine, create_question_engine
from .models import (
    ChangeType,
    ExtractedEntity,
    NormalizationChange,
    NormalizationResult,
    ProcessedQuestion,
    Question,
    QuestionAnalysis,
    QuestionComplexity,
    QuestionIntent,
    QuestionMetadata,
    QuestionSuggestion,
    QuestionType,
    ServiceReference,
    ValidationIssue,
    ValidationResult,
    ValidationWarning,
)
from .normalizer import NormalizerConfig, QuestionNormalizer
from .validator import QuestionValidator, ValidatorConfig

__all__ = [
    "ChangeType",
    "ClassifierConfig",
    "ExtractedEntity",
    "NormalizationChange",
    "NormalizationResult",
    "NormalizerConfig",
    "ProcessedQuestion",
    "Question",
    "QuestionAnalysis",
    "QuestionClassifier",
    "QuestionComplexity",
    "QuestionEngine",
    "QuestionIntent",
    "QuestionMetadata",
    "QuestionNormalizer",
    "QuestionSuggestion",
    "QuestionType",
    "QuestionValidator",
    "ServiceReference",
    "ValidationIssue",
    "ValidationResult",
    "ValidationWarning",
    "ValidatorConfig",
    "create_question_engine",
]
