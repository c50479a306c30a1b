"""Question to answer pipeline."""

import logging
import time
from dataclasses import asdict, dataclass, field

from knowledge_hub.answer import Answer, AnswerOptions, AnswerSynthesizer
from knowledge_hub.config import Settings, get_settings
from knowledge_hub.docs_client import DocumentationClient, ReadResponse, create_documentation_client
from knowledge_hub.errors import ErrorCode, ErrorDetail, KnowledgeHubError
from knowledge_hub.question import (
    NormalizationResult,
    Question,
    QuestionAnalysis,
    QuestionEngine,
    QuestionMetadata,
    QuestionSuggestion,
    ValidationResult,
    create_question_engine,
)
from knowledge_hub.search import DocumentationSearchResult, DocumentationSearchService, SearchOptions, SearchResult
from knowledge_hub.search.service import create_search_service
from knowledge_hub.session import ConversationEntry, InMemorySessionStore, Session, SessionStore

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal error occurred while processing your question."


@dataclass
class QuestionProcessingResult:
    """Complete result of processing a question."""

    session_id: str | None
    success: bool
    processing_time_ms: float
    question: Question | None = None
    validation: ValidationResult | None = None
    normalization: NormalizationResult | None = None
    analysis: QuestionAnalysis | None = None
    search: DocumentationSearchResult | None = None
    answer: Answer | None = None
    suggestions: list[QuestionSuggestion] = field(default_factory=list)
    context: list[ConversationEntry] = field(default_factory=list)
    error: ErrorDetail | None = None


class KnowledgePipeline:
    """Chains question processing, documentation search and answer synthesis."""

    def __init__(
        self,
        question_engine: QuestionEngine,
        search_service: DocumentationSearchService,
        synthesizer: AnswerSynthesizer,
        session_store: SessionStore,
        history_context_size: int = 5,
    ):
        """Initialize pipeline.

        Args:
            question_engine: Validation, normalization and analysis
            search_service: Documentation search
            synthesizer: Answer synthesis
            session_store: Session and history storage
            history_context_size: Number of past exchanges returned as context
        """
        self.question_engine = question_engine
        self.search_service = search_service
        self.synthesizer = synthesizer
        self.session_store = session_store
        self.history_context_size = history_context_size

    def validate(self, text: str) -> ValidationResult:
        return self.question_engine.validate(text)

    def normalize(self, text: str) -> NormalizationResult:
        return self.question_engine.normalize(text)

    def analyze(self, text: str) -> QuestionAnalysis:
        return self.question_engine.analyze(text)

    async def process_question(
        self,
        text: str,
        session_id: str | None = None,
        metadata: QuestionMetadata | None = None,
        search_options: SearchOptions | None = None,
        answer_options: AnswerOptions | None = None,
    ) -> QuestionProcessingResult:
        """Answer a question end to end.

        Args:
            text: Raw question text
            session_id: Existing session, a new one is created when absent or expired
            metadata: Request metadata
            search_options: Overrides for the search strategy
            answer_options: Overrides for answer generation

        Returns:
            QuestionProcessingResult; failures carry an error with a next-step suggestion
        """
        start_time = time.perf_counter()
        metadata = metadata or QuestionMetadata()

        try:
            session_id = await self._ensure_session(session_id, metadata)
            context = await self.session_store.get_history(session_id, self.history_context_size)

            processed = self.question_engine.process(text, session_id, metadata)
            result = QuestionProcessingResult(
                session_id=session_id,
                success=False,
                processing_time_ms=0.0,
                question=processed.question,
                validation=processed.validation,
                normalization=processed.normalization,
                analysis=processed.analysis,
                suggestions=processed.suggestions,
                context=context,
            )

            if not processed.success:
                issue = processed.validation.first_error
                code = ErrorCode(issue.code) if issue else ErrorCode.INTERNAL_ERROR
                result.error = ErrorDetail.from_code(code, processed.error or "Question validation failed")
                return self._finish(result, start_time)

            search = await self.search_service.search(text, session_id, search_options, processed=processed)
            result.search = search
            if not search.success:
                result.error = search.error
                # Stale cached results still produce an answer
                if not search.results:
                    return self._finish(result, start_time)

            answer = self.synthesizer.generate_answer(
                processed.question, search.results, processed.analysis, answer_options
            )
            result.answer = answer
            result.success = True
            self._finish(result, start_time)

            await self.session_store.append_conversation(
                session_id,
                question=processed.question.original_text,
                answer=answer.text,
                sources=[source.url for source in answer.sources],
                response_time_ms=result.processing_time_ms,
            )
            return result

        except KnowledgeHubError as e:
            logger.error(f"Question processing failed: {e}", exc_info=True)
            return QuestionProcessingResult(
                session_id=session_id,
                success=False,
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
                error=e.to_detail(),
            )
        except Exception as e:
            logger.exception(f"Unexpected error while processing question: {e}")
            return QuestionProcessingResult(
                session_id=session_id,
                success=False,
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
                error=ErrorDetail.from_code(ErrorCode.INTERNAL_ERROR, INTERNAL_ERROR_MESSAGE),
            )

    async def search(
        self, text: str, session_id: str | None = None, options: SearchOptions | None = None
    ) -> DocumentationSearchResult:
        """Search documentation without synthesizing an answer."""
        return await self.search_service.search(text, session_id, options)

    async def get_related_documentation(self, url: str) -> list[SearchResult]:
        return await self.search_service.get_related_documentation(url)

    async def read_documentation(self, url: str, max_length: int | None = None) -> ReadResponse:
        return await self.search_service.client.read_documentation(url, max_length)

    async def create_session(self, metadata: QuestionMetadata | None = None) -> str:
        return await self.session_store.create_session(asdict(metadata or QuestionMetadata()))

    async def get_session(self, session_id: str) -> Session | None:
        return await self.session_store.get_session(session_id)

    async def delete_session(self, session_id: str) -> bool:
        deleted = await self.session_store.delete_session(session_id)
        if deleted:
            logger.info(f"Deleted session {session_id}")
        return deleted

    async def get_history(self, session_id: str, limit: int | None = None) -> list[ConversationEntry]:
        return await self.session_store.get_history(session_id, limit)

    async def close(self) -> None:
        await self.search_service.client.close()

    async def _ensure_session(self, session_id: str | None, metadata: QuestionMetadata) -> str:
        if session_id and await self.session_store.get_session(session_id) is not None:
            return session_id
        if session_id:
            logger.info(f"Session {session_id} not found or expired, starting a new one")
        return await self.create_session(metadata)

    @staticmethod
    def _finish(result: QuestionProcessingResult, start_time: float) -> QuestionProcessingResult:
        result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        if result.error and not result.success:
            logger.info(f"Question processing failed with {result.error.code.value}")
        return result


def build_pipeline(
    settings: Settings | None = None,
    client: DocumentationClient | None = None,
    session_store: SessionStore | None = None,
) -> KnowledgePipeline:
    """Wire a pipeline from configuration.

    Args:
        settings: Settings to use, defaults to the global settings
        client: Documentation client, built from settings when omitted
        session_store: Session store, in-memory when omitted

    Returns:
        Configured KnowledgePipeline
    """
    settings = settings or get_settings()
    question_engine = create_question_engine(settings)
    return KnowledgePipeline(
        question_engine=question_engine,
        search_service=create_search_service(
            client if client is not None else create_documentation_client(settings),
            question_engine=question_engine,
            settings=settings,
        ),
        synthesizer=AnswerSynthesizer(
            AnswerOptions(
                max_sources=settings.answer_max_sources,
                min_score=settings.answer_min_score,
                max_length=settings.answer_max_length,
            )
        ),
        session_store=(
            session_store
            if session_store is not None
            else InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
        ),
        history_context_size=settings.history_context_size,
    )
