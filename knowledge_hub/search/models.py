"""Search models and data structures."""

from dataclasses import dataclass, field

from knowledge_hub.errors import ErrorDetail
from knowledge_hub.question.models import QuestionAnalysis


@dataclass
class SearchOptions:
    """Caller overrides for a single search."""

    max_results: int | None = None
    timeout: float | None = None
    use_cache: bool = True
    topics: list[str] | None = None


@dataclass(frozen=True)
class SearchStrategy:
    """How a search is executed."""

    primary_topics: list[str]
    fallback_topics: list[str]
    max_results: int
    timeout: float
    use_cache: bool = True


@dataclass(frozen=True)
class SearchResult:
    """A documentation hit after deduplication."""

    rank_order: int
    url: str
    title: str
    context: str
    topic: str


@dataclass(frozen=True)
class SearchResultRanking:
    """A search result with its ranking scores."""

    result: SearchResult
    relevance_score: float
    service_match: float
    title_match: float
    context_match: float
    quality_score: float
    final_score: float


@dataclass(frozen=True)
class TopicFailure:
    """A topic whose queries were exhausted without a result."""

    topic: str
    code: str
    message: str
    attempts: int


@dataclass
class PerformanceMetrics:
    """Timing information for a search."""

    search_time_ms: float = 0.0
    ranking_time_ms: float = 0.0
    total_time_ms: float = 0.0
    backend_calls: int = 0


@dataclass
class SearchMetadata:
    """Bookkeeping attached to a search result."""

    searched_topics: list[str] = field(default_factory=list)
    fallback_used: bool = False
    cache_hit: bool = False
    stale_fallback: bool = False
    failures: list[TopicFailure] = field(default_factory=list)
    timed_out_topics: list[str] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)


@dataclass
class DocumentationSearchResult:
    """Outcome of a documentation search."""

    results: list[SearchResultRanking]
    analysis: QuestionAnalysis
    strategy: SearchStrategy
    total_time_ms: float
    cached: bool = False
    success: bool = True
    error: ErrorDetail | None = None
    metadata: SearchMetadata = field(default_factory=SearchMetadata)

    @property
    def total_results(self) -> int:
        return len(self.results)
