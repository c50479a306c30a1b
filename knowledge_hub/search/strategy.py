"""Search strategy selection."""

from pydantic import BaseModel, Field

from knowledge_hub.question.models import QuestionAnalysis, QuestionComplexity
from .models import SearchOptions, SearchStrategy


class StrategyConfig(BaseModel):
    """Configuration for search strategy selection."""

    max_primary_topics: int = 3
    max_fallback_topics: int = 2
    fallback_topic_pool: list[str] = Field(
        default_factory=lambda: ["general", "reference_documentation", "troubleshooting"]
    )
    timeout_ceiling: float = 30.0
    max_results: dict[QuestionComplexity, int] = Field(
        default_factory=lambda: {
            QuestionComplexity.SIMPLE: 5,
            QuestionComplexity.MODERATE: 8,
            QuestionComplexity.COMPLEX: 12,
        }
    )
    timeouts: dict[QuestionComplexity, float] = Field(
        default_factory=lambda: {
            QuestionComplexity.SIMPLE: 10.0,
            QuestionComplexity.MODERATE: 20.0,
            QuestionComplexity.COMPLEX: 30.0,
        }
    )


def build_strategy(
    analysis: QuestionAnalysis,
    config: StrategyConfig | None = None,
    options: SearchOptions | None = None,
) -> SearchStrategy:
    """Derive a search strategy from a question analysis.

    Args:
        analysis: Classifier output
        config: Strategy configuration
        options: Caller overrides for topics, result count, timeout and caching

    Returns:
        SearchStrategy to execute
    """
    config = config or StrategyConfig()
    options = options or SearchOptions()

    topics = options.topics if options.topics else analysis.suggested_topics
    primary = list(dict.fromkeys(topics))[: config.max_primary_topics]
    fallback = [topic for topic in config.fallback_topic_pool if topic not in primary][: config.max_fallback_topics]

    max_results = options.max_results or config.max_results[analysis.complexity]
    timeout = options.timeout or config.timeouts[analysis.complexity]

    return SearchStrategy(
        primary_topics=primary,
        fallback_topics=fallback,
        max_results=max_results,
        timeout=min(timeout, config.timeout_ceiling),
        use_cache=options.use_cache,
    )
