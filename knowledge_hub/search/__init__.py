"""Documentation search: strategy, retries, caching, ranking and orchestration."""

from .cache import SearchCache
from .models import (
    DocumentationSearchResult,
    PerformanceMetrics,
    SearchMetadata,
    SearchOptions,
    SearchResult,
    SearchResultRanking,
    SearchStrategy,
    TopicFailure,
)
from .ranker import RankingWeights, rank
from .retry import RetryPolicy
from .service import DocumentationSearchService, create_search_service
from .strategy import StrategyConfig, build_strategy

__all__ = [
    "DocumentationSearchResult",
    "DocumentationSearchService",
    "PerformanceMetrics",
    "RankingWeights",
    "RetryPolicy",
    "SearchCache",
    "SearchMetadata",
    "SearchOptions",
    "SearchResult",
    "SearchResultRanking",
    "SearchStrategy",
    "StrategyConfig",
    "TopicFailure",
    "build_strategy",
    "create_search_service",
    "rank",
]
