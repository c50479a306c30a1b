"""Tests for question validation."""

import pytest

from knowledge_hub.errors import ErrorCode
from knowledge_hub.question.validator import (
    NOT_AWS_RELATED,
    UNSUPPORTED_LANGUAGE,
    QuestionValidator,
    ValidatorConfig,
    detect_language,
    is_aws_related,
)


class TestQuestionValidator:
    """Test the question validator."""

    @pytest.fixture
    def validator(self):
        return QuestionValidator()

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_empty_question(self, validator, text):
        """Test empty and whitespace-only questions are rejected."""
        result = validator.validate(text)

        assert result.is_valid is False
        assert result.first_error.code == ErrorCode.EMPTY_QUESTION.value
        assert len(result.errors) == 1

    def test_too_short(self, validator):
        """Test questions below the minimum length are rejected."""
        result = validator.validate("ab")

        assert result.is_valid is False
        assert result.has_minimum_length is False
        assert result.first_error.code == ErrorCode.TOO_SHORT.value

    def test_minimum_length_counts_trimmed_text(self, validator):
        """Test surrounding whitespace does not count towards the minimum."""
        assert validator.validate("  ab  ").first_error.code == ErrorCode.TOO_SHORT.value
        assert validator.validate("  abc  ").is_valid is True

    def test_too_long(self, validator):
        """Test questions above the maximum length are rejected."""
        result = validator.validate("a" * 2001)

        assert result.is_valid is False
        assert result.has_maximum_length is False
        assert result.first_error.code == ErrorCode.TOO_LONG.value

    def test_maximum_length_is_inclusive(self, validator):
        """Test a question exactly at the maximum length is accepted."""
        assert validator.validate("a" * 2000).is_valid is True

    def test_offensive_content(self, validator):
        """Test offensive questions are rejected."""
        result = validator.validate("why is this shit S3 bucket failing")

        assert result.is_valid is False
        assert result.contains_offensive_content is True
        assert result.first_error.code == ErrorCode.OFFENSIVE_CONTENT.value

    def test_profanity_filter_disabled(self):
        """Test offensive terms are ignored when the filter is off."""
        validator = QuestionValidator(enable_profanity_filter=False)

        result = validator.validate("why is this shit S3 bucket failing")

        assert result.is_valid is True
        assert result.contains_offensive_content is False

    def test_rules_short_circuit(self):
        """Test only the first failing rule is reported."""
        validator = QuestionValidator(ValidatorConfig(min_length=3, max_length=5))

        result = validator.validate("shit shit shit")

        assert [error.code for error in result.errors] == [ErrorCode.TOO_LONG.value]

    def test_aws_related_question(self, validator):
        """Test AWS questions pass without warnings."""
        result = validator.validate("How do I create an S3 bucket with versioning?")

        assert result.is_valid is True
        assert result.is_aws_related is True
        assert result.warnings == []
        assert result.language == "en"

    def test_not_aws_related_warning(self, validator):
        """Test questions without AWS signal get a warning but stay valid."""
        result = validator.validate("asdkjhasd")

        assert result.is_valid is True
        assert result.is_aws_related is False
        assert [warning.code for warning in result.warnings] == [NOT_AWS_RELATED]
        assert result.warnings[0].suggestion

    def test_unsupported_language_warning(self, validator):
        """Test non-Latin text gets a language warning."""
        result = validator.validate("如何创建 S3 存储桶")

        assert result.is_valid is True
        assert result.language == "unknown"
        assert UNSUPPORTED_LANGUAGE in [warning.code for warning in result.warnings]


class TestHelpers:
    """Test validation helpers."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Lambda timeout", True),
            ("Amazon Simple Storage Service pricing", True),
            ("configure a security group", True),
            ("how do I bake bread", False),
            ("lambdas in haskell-like calculus", False),
        ],
    )
    def test_is_aws_related(self, text, expected):
        assert is_aws_related(text) is expected

    def test_detect_language(self):
        assert detect_language("What is EC2?") == "en"
        assert detect_language("Qu'est-ce que Amazon S3 ?") == "en"
        assert detect_language("Что такое S3") == "unknown"
        assert detect_language("12345 ???") == "en"
