"""Question validation rules."""

import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from knowledge_hub.errors import ErrorCode
from .lexicon import AWS_KEYWORDS, SERVICES
from .models import ValidationIssue, ValidationResult, ValidationWarning

logger = logging.getLogger(__name__)

NOT_AWS_RELATED = "NOT_AWS_RELATED"
UNSUPPORTED_LANGUAGE = "UNSUPPORTED_LANGUAGE"


class ValidatorConfig(BaseModel):
    """Configuration for the question validator."""

    min_length: int = 3
    max_length: int = 2000
    enable_profanity_filter: bool = True
    offensive_terms: list[str] = Field(default_factory=lambda: ["fuck", "shit", "cunt", "asshole"])
    supported_languages: list[str] = Field(default_factory=lambda: ["en"])


def _build_domain_pattern() -> re.Pattern[str]:
    terms = {term for service in SERVICES for term in service.terms()}
    terms.update(keyword.lower() for keyword in AWS_KEYWORDS)
    alternation = "|".join(
        re.escape(term).replace(r"\ ", r"\s+") for term in sorted(terms, key=len, reverse=True)
    )
    return re.compile(rf"(?<![\w-])(?:{alternation})(?![\w-])", re.IGNORECASE)


_DOMAIN_PATTERN = _build_domain_pattern()


def detect_language(text: str) -> str:
    """Best-effort language tag.

    Only distinguishes Latin-script text, which is tagged "en", from
    everything else.
    """
    letters = [char for char in text if char.isalpha()]
    if not letters:
        return "en"
    latin = sum(1 for char in letters if ord(char) < 0x250)
    return "en" if latin / len(letters) >= 0.8 else "unknown"


def is_aws_related(text: str) -> bool:
    """Check whether the text mentions an AWS service or AWS-adjacent keyword."""
    return _DOMAIN_PATTERN.search(text) is not None


class QuestionValidator:
    """Validates raw question text before any processing happens."""

    def __init__(self, config: ValidatorConfig | None = None, **kwargs: Any) -> None:
        self.config = config or ValidatorConfig(**kwargs)

    def validate(self, raw_text: str) -> ValidationResult:
        """Validate a raw question.

        Rejection rules are applied in order and stop at the first failure:
        empty, too short, too long, offensive. Questions that pass get a
        warning when they carry no AWS signal.

        Args:
            raw_text: Question exactly as the user typed it

        Returns:
            ValidationResult describing the outcome
        """
        text = (raw_text or "").strip()
        length = len(text)
        result = ValidationResult(
            is_valid=False,
            is_aws_related=False,
            has_minimum_length=length >= self.config.min_length,
            has_maximum_length=length <= self.config.max_length,
            contains_offensive_content=False,
        )

        if not text:
            return self._reject(result, ErrorCode.EMPTY_QUESTION, "Question cannot be empty")

        if not result.has_minimum_length:
            return self._reject(
                result,
                ErrorCode.TOO_SHORT,
                f"Question must be at least {self.config.min_length} characters long",
            )

        if not result.has_maximum_length:
            return self._reject(
                result,
                ErrorCode.TOO_LONG,
                f"Question must be at most {self.config.max_length} characters long",
            )

        if self.config.enable_profanity_filter and self._contains_offensive_content(text):
            result.contains_offensive_content = True
            return self._reject(result, ErrorCode.OFFENSIVE_CONTENT, "Question contains inappropriate content")

        result.is_valid = True
        result.language = detect_language(text)
        result.is_aws_related = is_aws_related(text)

        if not result.is_aws_related:
            result.warnings.append(
                ValidationWarning(
                    code=NOT_AWS_RELATED,
                    message="This question may not be related to AWS",
                    suggestion="Mention the AWS service you are asking about, for example S3 or Lambda",
                )
            )

        if result.language not in self.config.supported_languages:
            result.warnings.append(
                ValidationWarning(
                    code=UNSUPPORTED_LANGUAGE,
                    message="This question may not be written in a supported language",
                    suggestion="Ask the question in English for the best results",
                )
            )

        return result

    def _contains_offensive_content(self, text: str) -> bool:
        lowered = text.lower()
        return any(term.lower() in lowered for term in self.config.offensive_terms if term)

    @staticmethod
    def _reject(result: ValidationResult, code: ErrorCode, message: str) -> ValidationResult:
        logger.info(f"Question rejected: {code.value}")
        result.errors.append(ValidationIssue(code=code.value, message=message))
        return result
