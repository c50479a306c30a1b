"""Question engine chaining validation, normalization and analysis."""

import logging
import time
import uuid
from datetime import datetime, timezone

from knowledge_hub.config import Settings, get_settings
from .classifier import ClassifierConfig, QuestionClassifier
from .lexicon import GENERAL_TOPIC
from .models import (
    NormalizationResult,
    ProcessedQuestion,
    Question,
    QuestionAnalysis,
    QuestionComplexity,
    QuestionIntent,
    QuestionMetadata,
    QuestionSuggestion,
    QuestionType,
    ValidationResult,
)
from .normalizer import NormalizerConfig, QuestionNormalizer
from .validator import UNSUPPORTED_LANGUAGE, QuestionValidator, ValidatorConfig

logger = logging.getLogger(__name__)


class QuestionEngine:
    """Turns raw question text into an analyzed question."""

    def __init__(
        self,
        validator: QuestionValidator | None = None,
        normalizer: QuestionNormalizer | None = None,
        classifier: QuestionClassifier | None = None,
        confidence_threshold: float = 0.6,
    ):
        """Initialize question engine.

        Args:
            validator: Validation stage
            normalizer: Normalization stage
            classifier: Analysis stage
            confidence_threshold: Analysis confidence below which a clarification is suggested
        """
        self.validator = validator or QuestionValidator()
        self.normalizer = normalizer or QuestionNormalizer()
        self.classifier = classifier or QuestionClassifier()
        self.confidence_threshold = confidence_threshold

    def validate(self, raw_text: str) -> ValidationResult:
        return self.validator.validate(raw_text)

    def normalize(self, raw_text: str) -> NormalizationResult:
        return self.normalizer.normalize(raw_text)

    def analyze(self, normalized_text: str) -> QuestionAnalysis:
        return self.classifier.analyze(normalized_text)

    def process(
        self,
        text: str,
        session_id: str | None = None,
        metadata: QuestionMetadata | None = None,
    ) -> ProcessedQuestion:
        """Validate, normalize and analyze a question.

        Processing stops after validation when the question is rejected; the
        returned analysis is then an empty placeholder.

        Args:
            text: Raw question text
            session_id: Session the question belongs to
            metadata: Request metadata

        Returns:
            ProcessedQuestion with every stage's result
        """
        start_time = time.perf_counter()
        text = text or ""
        question_id = str(uuid.uuid4())
        metadata = metadata or QuestionMetadata()

        validation = self.validate(text)
        if not validation.is_valid:
            error = validation.first_error
            return ProcessedQuestion(
                question=self._build_question(question_id, session_id, text, text, validation, metadata),
                validation=validation,
                normalization=NormalizationResult(original=text, normalized=text),
                analysis=self.empty_analysis(question_id),
                suggestions=[],
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
                success=False,
                error=error.message if error else "Question validation failed",
            )

        normalization = self.normalize(text)
        analysis = self.analyze(normalization.normalized)
        analysis.question_id = question_id
        suggestions = self.generate_suggestions(validation, analysis)
        processing_time_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"Question {question_id} processed: type={analysis.question_type.value}, "
            f"services={analysis.service_names}, complexity={analysis.complexity.value}, "
            f"confidence={analysis.confidence:.2f}"
        )

        return ProcessedQuestion(
            question=self._build_question(
                question_id, session_id, text, normalization.normalized, validation, metadata
            ),
            validation=validation,
            normalization=normalization,
            analysis=analysis,
            suggestions=suggestions,
            processing_time_ms=processing_time_ms,
            success=True,
        )

    def generate_suggestions(
        self, validation: ValidationResult, analysis: QuestionAnalysis | None = None
    ) -> list[QuestionSuggestion]:
        """Build hints that could help the user ask a better question."""
        suggestions = []

        if not validation.is_aws_related:
            suggestions.append(
                QuestionSuggestion(
                    type="clarification",
                    text="Try mentioning specific AWS services like EC2, S3, Lambda, or RDS",
                    confidence=0.8,
                    reason="Question does not appear to be AWS-related",
                )
            )

        if any(warning.code == UNSUPPORTED_LANGUAGE for warning in validation.warnings):
            suggestions.append(
                QuestionSuggestion(
                    type="alternative",
                    text="Please rephrase your question in English for better results",
                    confidence=0.9,
                    reason="Language detection indicates non-English content",
                )
            )

        if analysis is not None and analysis.confidence < self.confidence_threshold:
            suggestions.append(
                QuestionSuggestion(
                    type="clarification",
                    text="Could you provide more specific details about what you're trying to accomplish?",
                    confidence=0.7,
                    reason="Low confidence in question analysis",
                )
            )

        return suggestions

    @staticmethod
    def empty_analysis(question_id: str | None = None) -> QuestionAnalysis:
        return QuestionAnalysis(
            question_type=QuestionType.CONCEPTUAL,
            complexity=QuestionComplexity.SIMPLE,
            intent=QuestionIntent.LEARN,
            aws_services=[],
            entities=[],
            confidence=0.0,
            suggested_topics=[GENERAL_TOPIC],
            question_id=question_id,
        )

    @staticmethod
    def _build_question(
        question_id: str,
        session_id: str | None,
        original_text: str,
        normalized_text: str,
        validation: ValidationResult,
        metadata: QuestionMetadata,
    ) -> Question:
        return Question(
            id=question_id,
            session_id=session_id,
            original_text=original_text,
            normalized_text=normalized_text,
            language=validation.language,
            timestamp=datetime.now(timezone.utc),
            metadata=metadata,
        )


def create_question_engine(settings: Settings | None = None) -> QuestionEngine:
    """Create a question engine from configuration.

    Args:
        settings: Settings to use, defaults to the global settings

    Returns:
        Configured QuestionEngine
    """
    settings = settings or get_settings()
    return QuestionEngine(
        validator=QuestionValidator(
            ValidatorConfig(
                min_length=settings.min_question_length,
                max_length=settings.max_question_length,
                enable_profanity_filter=settings.enable_profanity_filter,
                offensive_terms=settings.offensive_terms,
                supported_languages=settings.supported_languages,
            )
        ),
        normalizer=QuestionNormalizer(NormalizerConfig(enable_spell_check=settings.enable_spell_check)),
        classifier=QuestionClassifier(
            ClassifierConfig(
                simple_token_threshold=settings.simple_token_threshold,
                complex_token_threshold=settings.complex_token_threshold,
                type_priority=settings.question_type_priority,
            )
        ),
        confidence_threshold=settings.confidence_threshold,
    )
