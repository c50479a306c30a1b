"""Documentation search orchestration."""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any

from knowledge_hub.config import Settings, get_settings
from knowledge_hub.docs_client.base import DocumentationClient, DocumentationHit
from knowledge_hub.errors import DocumentationClientError, ErrorCode, ErrorDetail
from knowledge_hub.question.engine import QuestionEngine
from knowledge_hub.question.models import ProcessedQuestion, QuestionAnalysis
from .cache import CacheKey, SearchCache
from .models import (
    DocumentationSearchResult,
    SearchMetadata,
    SearchOptions,
    SearchResult,
    SearchStrategy,
    TopicFailure,
)
from .ranker import RankingWeights, rank, url_key
from .retry import RetryPolicy
from .strategy import StrategyConfig, build_strategy

logger = logging.getLogger(__name__)


class DocumentationSearchService:
    """Searches documentation topics in two phases and ranks the merged results.

    Topics from the strategy's primary list are queried in parallel. When
    they return fewer than ``min_results_before_fallback`` results the
    fallback topics are queried too. All calls into the documentation
    client share one semaphore, so the concurrency cap holds across every
    search running on this instance.
    """

    def __init__(
        self,
        client: DocumentationClient,
        question_engine: QuestionEngine | None = None,
        cache: SearchCache | None = None,
        retry_policy: RetryPolicy | None = None,
        strategy_config: StrategyConfig | None = None,
        ranking_weights: RankingWeights | None = None,
        max_concurrent_requests: int = 5,
        min_results_before_fallback: int = 3,
        request_timeout: float = 10.0,
    ):
        """Initialize documentation search service.

        Args:
            client: Documentation backend
            question_engine: Engine used when the caller passes raw text only
            cache: Result cache
            retry_policy: Per-topic retry policy
            strategy_config: Strategy selection configuration
            ranking_weights: Ranking component weights
            max_concurrent_requests: Outstanding backend calls allowed at once
            min_results_before_fallback: Primary result count below which fallback topics are searched
            request_timeout: Timeout in seconds for a single backend call
        """
        self.client = client
        self.question_engine = question_engine if question_engine is not None else QuestionEngine()
        self.cache = cache if cache is not None else SearchCache()
        self.retry_policy = retry_policy if retry_policy is not None else RetryPolicy()
        self.strategy_config = strategy_config if strategy_config is not None else StrategyConfig()
        self.ranking_weights = ranking_weights if ranking_weights is not None else RankingWeights()
        self.max_concurrent_requests = max_concurrent_requests
        self.min_results_before_fallback = min_results_before_fallback
        self.request_timeout = request_timeout
        self._semaphore = asyncio.Semaphore(max_concurrent_requests)

    async def search(
        self,
        question: str,
        session_id: str | None = None,
        options: SearchOptions | None = None,
        processed: ProcessedQuestion | None = None,
    ) -> DocumentationSearchResult:
        """Search documentation for a question.

        Args:
            question: Raw question text
            session_id: Session the search belongs to
            options: Caller overrides for the strategy
            processed: Already processed question, skips re-analysis when given

        Returns:
            DocumentationSearchResult; ``success`` is False when the question
            was rejected or every topic failed. In the latter case previously
            cached results for the same key are still attached.
        """
        start_time = time.perf_counter()
        processed = processed or self.question_engine.process(question, session_id)
        analysis = processed.analysis
        strategy = build_strategy(analysis, self.strategy_config, options)

        if not processed.success:
            error = processed.validation.first_error
            code = ErrorCode(error.code) if error else ErrorCode.INTERNAL_ERROR
            return DocumentationSearchResult(
                results=[],
                analysis=analysis,
                strategy=strategy,
                total_time_ms=self._elapsed_ms(start_time),
                success=False,
                error=ErrorDetail.from_code(code, processed.error or "Question validation failed"),
            )

        normalized_text = processed.question.normalized_text
        cache_key = self.cache.make_key(normalized_text, strategy.primary_topics, strategy.max_results)

        if strategy.use_cache:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info(f"Search cache hit for question {processed.question.id}")
                return self._from_cache(cached, analysis, strategy, start_time)

        metadata = SearchMetadata()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + strategy.timeout

        search_start = time.perf_counter()
        hits = await self._run_phase(normalized_text, strategy.primary_topics, strategy.max_results, deadline, metadata)
        metadata.searched_topics.extend(strategy.primary_topics)

        primary_count = sum(len(topic_hits) for topic_hits in hits.values())
        if (
            primary_count < self.min_results_before_fallback
            and strategy.fallback_topics
            and loop.time() < deadline
        ):
            logger.info(
                f"Primary topics returned {primary_count} results, searching fallback topics "
                f"{strategy.fallback_topics}"
            )
            metadata.fallback_used = True
            hits.update(
                await self._run_phase(
                    normalized_text, strategy.fallback_topics, strategy.max_results, deadline, metadata
                )
            )
            metadata.searched_topics.extend(strategy.fallback_topics)
        metadata.performance.search_time_ms = self._elapsed_ms(search_start)

        if metadata.failures and len(metadata.failures) == len(metadata.searched_topics):
            return self._all_topics_failed(cache_key, analysis, strategy, metadata, start_time)

        ranking_start = time.perf_counter()
        merged = self.merge_results(hits, strategy)
        rankings = rank(
            merged,
            analysis,
            question_text=normalized_text,
            primary_topics=strategy.primary_topics,
            weights=self.ranking_weights,
        )[: strategy.max_results]
        metadata.performance.ranking_time_ms = self._elapsed_ms(ranking_start)

        result = DocumentationSearchResult(
            results=rankings,
            analysis=analysis,
            strategy=strategy,
            total_time_ms=self._elapsed_ms(start_time),
            metadata=metadata,
        )
        metadata.performance.total_time_ms = result.total_time_ms

        if rankings:
            self.cache.set(cache_key, result)

        logger.info(
            f"Search for question {processed.question.id} returned {len(rankings)} results "
            f"from {len(metadata.searched_topics)} topics in {result.total_time_ms:.0f}ms"
        )
        return result

    @staticmethod
    def merge_results(
        hits: dict[str, list[DocumentationHit]], strategy: SearchStrategy
    ) -> list[SearchResult]:
        """Deduplicate hits across topics by URL.

        The copy with the best backend rank order wins; ties prefer primary
        topics, then topic name. Topics are visited in strategy order so the
        outcome does not depend on which query finished first.
        """
        primary = set(strategy.primary_topics)
        best: dict[str, tuple[tuple[int, int, str], SearchResult]] = {}

        for topic in [*strategy.primary_topics, *strategy.fallback_topics]:
            for hit in hits.get(topic, []):
                hit_topic = hit.topic or topic
                candidate = SearchResult(
                    rank_order=hit.rank_order,
                    url=hit.url,
                    title=hit.title,
                    context=hit.context,
                    topic=hit_topic,
                )
                order = (hit.rank_order, 0 if topic in primary else 1, hit_topic)
                key = url_key(hit.url)
                if key not in best or order < best[key][0]:
                    best[key] = (order, candidate)

        return [best[key][1] for key in sorted(best)]

    async def get_related_documentation(self, url: str) -> list[SearchResult]:
        """Find documentation pages related to a page."""
        response = await self.client.recommend(url)
        if not response.success:
            message = response.error.message if response.error else "unknown error"
            logger.warning(f"Related documentation lookup failed for {url}: {message}")
            return []
        return [
            SearchResult(
                rank_order=hit.rank_order,
                url=hit.url,
                title=hit.title,
                context=hit.context,
                topic=hit.topic or "general",
            )
            for hit in response.results
        ]

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Search cache cleared")

    def get_cache_stats(self) -> dict[str, Any]:
        return self.cache.stats()

    async def _run_phase(
        self,
        query: str,
        topics: list[str],
        limit: int,
        deadline: float,
        metadata: SearchMetadata,
    ) -> dict[str, list[DocumentationHit]]:
        if not topics:
            return {}

        attempts: dict[str, int] = {}
        tasks = {
            topic: asyncio.create_task(self._query_topic(query, topic, limit, metadata, attempts)) for topic in topics
        }
        remaining = max(0.0, deadline - asyncio.get_running_loop().time())
        _, pending = await asyncio.wait(tasks.values(), timeout=remaining)

        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        outcomes: dict[str, list[DocumentationHit]] = {}
        for topic, task in tasks.items():
            if task in pending:
                logger.warning(f"Search for topic '{topic}' did not finish before the deadline")
                metadata.timed_out_topics.append(topic)
                continue
            try:
                outcomes[topic] = task.result()
            except DocumentationClientError as e:
                logger.warning(f"Search for topic '{topic}' failed after {attempts.get(topic, 0)} attempts: {e}")
                metadata.failures.append(
                    TopicFailure(
                        topic=topic,
                        code=e.code.value,
                        message=e.user_message,
                        attempts=attempts.get(topic, 0),
                    )
                )
        return outcomes

    async def _query_topic(
        self, query: str, topic: str, limit: int, metadata: SearchMetadata, attempts: dict[str, int]
    ) -> list[DocumentationHit]:
        async def attempt() -> list[DocumentationHit]:
            async with self._semaphore:
                metadata.performance.backend_calls += 1
                attempts[topic] = attempts.get(topic, 0) + 1
                try:
                    response = await asyncio.wait_for(
                        self.client.search_documentation(query, [topic], limit),
                        timeout=self.request_timeout,
                    )
                except asyncio.TimeoutError:
                    raise DocumentationClientError(ErrorCode.TIMEOUT, f"Search for topic '{topic}' timed out")

            if not response.success:
                if response.error is None:
                    raise DocumentationClientError(ErrorCode.SEARCH_FAILED, "Documentation search failed")
                raise DocumentationClientError(response.error.code, response.error.message)
            return response.results

        return await self.retry_policy.run(attempt, description=f"Search for topic '{topic}'")

    def _from_cache(
        self,
        cached: DocumentationSearchResult,
        analysis: QuestionAnalysis,
        strategy: SearchStrategy,
        start_time: float,
        stale: bool = False,
        metadata: SearchMetadata | None = None,
    ) -> DocumentationSearchResult:
        base = metadata or cached.metadata
        return replace(
            cached,
            results=list(cached.results),
            analysis=analysis,
            strategy=strategy,
            total_time_ms=self._elapsed_ms(start_time),
            cached=True,
            metadata=replace(
                base,
                searched_topics=list(base.searched_topics),
                cache_hit=True,
                stale_fallback=stale,
            ),
        )

    def _all_topics_failed(
        self,
        cache_key: CacheKey,
        analysis: QuestionAnalysis,
        strategy: SearchStrategy,
        metadata: SearchMetadata,
        start_time: float,
    ) -> DocumentationSearchResult:
        stale = self.cache.peek(cache_key)
        if stale is not None:
            logger.warning("All documentation topics failed, serving cached results")
            return replace(
                self._from_cache(stale, analysis, strategy, start_time, stale=True, metadata=metadata),
                success=False,
                error=ErrorDetail.from_code(
                    ErrorCode.DOCUMENTATION_UNAVAILABLE,
                    "AWS documentation is temporarily unavailable, showing previously cached results",
                ),
            )

        logger.error(f"All documentation topics failed: {[f.topic for f in metadata.failures]}")
        total_time_ms = self._elapsed_ms(start_time)
        metadata.performance.total_time_ms = total_time_ms
        return DocumentationSearchResult(
            results=[],
            analysis=analysis,
            strategy=strategy,
            total_time_ms=total_time_ms,
            success=False,
            error=ErrorDetail.from_code(
                ErrorCode.DOCUMENTATION_UNAVAILABLE,
                "AWS documentation is temporarily unavailable",
            ),
            metadata=metadata,
        )

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000


def create_search_service(
    client: DocumentationClient,
    question_engine: QuestionEngine | None = None,
    settings: Settings | None = None,
) -> DocumentationSearchService:
    """Create a search service from configuration."""
    settings = settings or get_settings()
    return DocumentationSearchService(
        client=client,
        question_engine=question_engine,
        cache=SearchCache(
            ttl_seconds=settings.search_cache_ttl_seconds,
            max_entries=settings.search_cache_max_entries,
        ),
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        ),
        strategy_config=StrategyConfig(
            max_primary_topics=settings.max_primary_topics,
            max_fallback_topics=settings.max_fallback_topics,
            fallback_topic_pool=settings.fallback_topic_pool,
            timeout_ceiling=settings.search_timeout_ceiling,
        ),
        max_concurrent_requests=settings.max_concurrent_requests,
        min_results_before_fallback=settings.min_results_before_fallback,
        request_timeout=settings.docs_request_timeout,
    )
