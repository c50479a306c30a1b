"""Deterministic ranking of documentation search results.

Pure functions only: identical inputs always produce identical scores and
ordering, which the search cache relies on.
"""

import re
from collections.abc import Iterable, Sequence
from urllib.parse import urlparse

from pydantic import BaseModel, model_validator

from knowledge_hub.question.lexicon import SERVICES, STOP_WORDS
from knowledge_hub.question.models import QuestionAnalysis
from .models import SearchResult, SearchResultRanking

PRIMARY_TOPIC_BOOST = 0.1
OFFICIAL_DOCS_HOST = "docs.aws.amazon.com"
AWS_DOMAINS = ("amazon.com", "aws", "amazonaws.com")
SHORT_CONTEXT_LENGTH = 50
LONG_CONTEXT_LENGTH = 200

_TOKEN = re.compile(r"[a-z0-9]+")
_SERVICES_BY_NAME = {service.name: service for service in SERVICES}


class RankingWeights(BaseModel):
    """Weights of the ranking components. Must sum to 1."""

    relevance: float = 0.4
    service: float = 0.2
    title: float = 0.2
    context: float = 0.0
    quality: float = 0.2

    @model_validator(mode="after")
    def check_sum(self) -> "RankingWeights":
        total = self.relevance + self.service + self.title + self.context + self.quality
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Ranking weights must sum to 1, got {total:.3f}")
        return self


def url_key(url: str) -> str:
    """Identity of a URL for deduplication: case-insensitive, no trailing slash."""
    return url.strip().lower().rstrip("/")


def query_tokens(text: str) -> set[str]:
    return {token for token in _TOKEN.findall(text.lower()) if token not in STOP_WORDS}


def _relevance_scores(results: Sequence[SearchResult], primary_topics: set[str]) -> list[float]:
    inverse = [1.0 / result.rank_order for result in results]
    low, high = min(inverse), max(inverse)
    scores = []
    for result, value in zip(results, inverse):
        normalized = 1.0 if high == low else (value - low) / (high - low)
        boost = PRIMARY_TOPIC_BOOST if result.topic in primary_topics else 0.0
        scores.append(min(1.0, (1.0 - PRIMARY_TOPIC_BOOST) * normalized + boost))
    return scores


def _service_terms(analysis: QuestionAnalysis) -> list[str]:
    terms: list[str] = []
    for reference in analysis.aws_services:
        service = _SERVICES_BY_NAME.get(reference.service_name)
        candidates = service.terms() if service else [reference.service_name.lower()]
        terms.extend(term for term in candidates if term not in terms)
    return terms


def quality_score(result: SearchResult) -> float:
    """Heuristic quality from the URL host and the excerpt length."""
    host = (urlparse(result.url).hostname or "").lower()
    if host == OFFICIAL_DOCS_HOST:
        score = 0.9
    elif any(host == domain or host.endswith(f".{domain}") for domain in AWS_DOMAINS):
        score = 0.7
    else:
        score = 0.5

    length = len(result.context.strip())
    if length < SHORT_CONTEXT_LENGTH:
        score -= 0.2
    elif length >= LONG_CONTEXT_LENGTH:
        score += 0.1
    return max(0.0, min(1.0, score))


def rank(
    results: Iterable[SearchResult],
    analysis: QuestionAnalysis,
    question_text: str = "",
    primary_topics: Iterable[str] | None = None,
    weights: RankingWeights | None = None,
) -> list[SearchResultRanking]:
    """Score and order search results.

    Args:
        results: Deduplicated search results
        analysis: Analysis of the question being answered
        question_text: Normalized question text, used for title and context matching
        primary_topics: Topics searched in the primary phase
        weights: Component weights

    Returns:
        Rankings sorted by final score, then backend rank order, then URL
    """
    results = list(results)
    if not results:
        return []

    weights = weights or RankingWeights()
    primary = set(primary_topics or [])
    services = _service_terms(analysis)
    tokens = query_tokens(question_text)

    rankings = []
    for result, relevance in zip(results, _relevance_scores(results, primary)):
        title = result.title.lower()
        text = f"{title} {result.context.lower()}"
        service_match = 1.0 if any(term in text for term in services) else 0.0
        title_match = 1.0 if tokens & query_tokens(result.title) else 0.0
        context_match = 1.0 if tokens & query_tokens(result.context) else 0.0
        quality = quality_score(result)

        final = (
            weights.relevance * relevance
            + weights.service * service_match
            + weights.title * title_match
            + weights.context * context_match
            + weights.quality * quality
        )
        rankings.append(
            SearchResultRanking(
                result=result,
                relevance_score=round(relevance, 6),
                service_match=service_match,
                title_match=title_match,
                context_match=context_match,
                quality_score=round(quality, 6),
                final_score=round(final, 6),
            )
        )

    rankings.sort(key=lambda r: (-r.final_score, r.result.rank_order, url_key(r.result.url)))
    return rankings
