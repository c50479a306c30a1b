"""End-to-end tests for the question pipeline."""

from unittest.mock import patch

import pytest

from knowledge_hub.answer import AnswerType
from knowledge_hub.config import Settings
from knowledge_hub.docs_client import MockDocumentationClient
from knowledge_hub.docs_client.base import ClientError, SearchResponse
from knowledge_hub.errors import ErrorCode, SessionNotFoundError
from knowledge_hub.pipeline import INTERNAL_ERROR_MESSAGE, build_pipeline
from knowledge_hub.question import QuestionComplexity, QuestionType
from knowledge_hub.session import InMemorySessionStore


@pytest.fixture
def client():
    return MockDocumentationClient()


@pytest.fixture
def pipeline(client):
    return build_pipeline(Settings(retry_base_delay=0.0, retry_max_delay=0.0), client=client)


class TestScenarios:
    """Test representative questions end to end."""

    @pytest.mark.asyncio
    async def test_howto_question(self, pipeline):
        result = await pipeline.process_question("How do I create an S3 bucket with versioning?")

        assert result.success is True
        assert result.error is None
        assert result.session_id
        assert result.analysis.question_type == QuestionType.HOWTO
        assert result.analysis.service_names == ["S3"]
        assert result.analysis.complexity == QuestionComplexity.SIMPLE
        assert {"general", "reference_documentation"} <= set(result.analysis.suggested_topics)

        answer = result.answer
        assert answer.answer_type == AnswerType.HOWTO
        assert answer.sources
        assert answer.has_steps is True
        assert answer.has_code_examples is True
        assert "https://docs.aws.amazon.com/AmazonS3/latest/userguide/Versioning.html" in [
            source.url for source in answer.sources
        ]
        assert 0.0 < answer.confidence <= 1.0

    @pytest.mark.asyncio
    async def test_troubleshooting_question(self, pipeline):
        result = await pipeline.process_question("Lambda function timeout error with DynamoDB")

        assert result.success is True
        assert result.analysis.question_type == QuestionType.TROUBLESHOOTING
        assert set(result.analysis.service_names) == {"Lambda", "DynamoDB"}
        assert result.analysis.suggested_topics[0] == "troubleshooting"
        assert result.answer.answer_type == AnswerType.TROUBLESHOOTING
        assert any("lambda" in source.url for source in result.answer.sources)

    @pytest.mark.asyncio
    async def test_gibberish_question(self, pipeline):
        """Test a question with no signal yields a not-found answer, not an error."""
        result = await pipeline.process_question("asdkjhasd")

        assert result.success is True
        assert result.validation.is_aws_related is False
        assert result.analysis.confidence < 0.3
        assert result.analysis.suggested_topics == ["general"]
        assert result.search.metadata.fallback_used is True
        assert result.answer.answer_type == AnswerType.NOT_FOUND
        assert result.answer.sources == []
        assert result.answer.confidence == 0.0
        assert [suggestion.type for suggestion in result.suggestions] == ["clarification", "clarification"]


class TestErrors:
    """Test failure handling."""

    @pytest.mark.asyncio
    async def test_invalid_question_stops_before_search(self, pipeline, client):
        with patch.object(client, "search_documentation") as mock_search:
            result = await pipeline.process_question("ab")

        assert result.success is False
        assert result.error.code == ErrorCode.TOO_SHORT
        assert result.error.suggestion
        assert result.search is None
        assert result.answer is None
        mock_search.assert_not_called()

    @pytest.mark.asyncio
    async def test_documentation_unavailable(self, pipeline, client):
        failure = SearchResponse(success=False, error=ClientError(code=ErrorCode.CONNECTION_FAILED, message="down"))

        with patch.object(client, "search_documentation", return_value=failure):
            result = await pipeline.process_question("How do I create an S3 bucket with versioning?")

        assert result.success is False
        assert result.error.code == ErrorCode.DOCUMENTATION_UNAVAILABLE
        assert result.answer is None
        assert await pipeline.get_history(result.session_id) == []

    @pytest.mark.asyncio
    async def test_stale_results_still_answer(self, client):
        """Test expired cached results are used when the backend is down."""
        settings = Settings(search_cache_ttl_seconds=0.0, retry_base_delay=0.0, retry_max_delay=0.0)
        pipeline = build_pipeline(settings, client=client)
        question = "How do I create an S3 bucket with versioning?"
        failure = SearchResponse(success=False, error=ClientError(code=ErrorCode.TIMEOUT, message="slow"))

        fresh = await pipeline.process_question(question)
        with patch.object(client, "search_documentation", return_value=failure):
            result = await pipeline.process_question(question)

        assert result.success is True
        assert result.error.code == ErrorCode.DOCUMENTATION_UNAVAILABLE
        assert result.search.metadata.stale_fallback is True
        assert [s.url for s in result.answer.sources] == [s.url for s in fresh.answer.sources]

    @pytest.mark.asyncio
    async def test_unexpected_error_is_internal(self, pipeline):
        with patch.object(pipeline.synthesizer, "generate_answer", side_effect=RuntimeError("boom")):
            result = await pipeline.process_question("How do I create an S3 bucket with versioning?")

        assert result.success is False
        assert result.error.code == ErrorCode.INTERNAL_ERROR
        assert result.error.message == INTERNAL_ERROR_MESSAGE
        assert "boom" not in result.error.message

    @pytest.mark.asyncio
    async def test_known_error_keeps_its_code(self, pipeline):
        with patch.object(pipeline.session_store, "get_history", side_effect=SessionNotFoundError("abc")):
            result = await pipeline.process_question("How do I create an S3 bucket with versioning?")

        assert result.success is False
        assert result.error.code == ErrorCode.SESSION_NOT_FOUND


class TestSessions:
    """Test session handling across questions."""

    @pytest.mark.asyncio
    async def test_history_used_as_context(self, pipeline):
        first = await pipeline.process_question("How do I create an S3 bucket with versioning?")
        second = await pipeline.process_question(
            "Lambda function timeout error with DynamoDB", session_id=first.session_id
        )

        assert second.session_id == first.session_id
        assert [entry.question for entry in second.context] == ["How do I create an S3 bucket with versioning?"]

        history = await pipeline.get_history(first.session_id)
        assert [entry.question for entry in history] == [
            "How do I create an S3 bucket with versioning?",
            "Lambda function timeout error with DynamoDB",
        ]
        assert history[0].sources == [source.url for source in first.answer.sources]

    @pytest.mark.asyncio
    async def test_unknown_session_starts_new_one(self, pipeline):
        result = await pipeline.process_question("How do I create an S3 bucket?", session_id="expired-session")

        assert result.success is True
        assert result.session_id != "expired-session"
        assert result.context == []

    @pytest.mark.asyncio
    async def test_create_session(self, pipeline):
        session_id = await pipeline.create_session()

        session = await pipeline.session_store.get_session(session_id)

        assert session is not None
        assert "user_agent" in session.metadata


class TestStages:
    """Test the individual stages exposed by the pipeline."""

    def test_validate(self, pipeline):
        assert pipeline.validate("").first_error.code == ErrorCode.EMPTY_QUESTION.value

    def test_normalize(self, pipeline):
        assert pipeline.normalize("lamda  timeout").normalized == "Lambda timeout"

    def test_analyze(self, pipeline):
        assert pipeline.analyze("Lambda fails with a timeout error").question_type == QuestionType.TROUBLESHOOTING


class TestBuildPipeline:
    """Test build_pipeline wiring."""

    @pytest.mark.asyncio
    async def test_injected_session_store_receives_history(self, client):
        store = InMemorySessionStore()
        pipeline = build_pipeline(Settings(), client=client, session_store=store)

        result = await pipeline.process_question("How do I create an S3 bucket?")

        assert pipeline.session_store is store
        assert len(store) == 1
        assert [entry.question for entry in await store.get_history(result.session_id)] == [
            "How do I create an S3 bucket?"
        ]

    def test_cache_settings_applied(self, client):
        pipeline = build_pipeline(
            Settings(search_cache_ttl_seconds=42.0, search_cache_max_entries=9), client=client
        )

        assert pipeline.search_service.cache.ttl_seconds == 42.0
        assert pipeline.search_service.cache.max_entries == 9
