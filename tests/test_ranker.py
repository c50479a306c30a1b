"""Tests for result ranking."""

import random

import pytest

from knowledge_hub.question.classifier import QuestionClassifier
from knowledge_hub.search.models import SearchResult
from knowledge_hub.search.ranker import RankingWeights, quality_score, rank, url_key

QUESTION = "How do I create an S3 bucket with versioning?"


@pytest.fixture
def analysis():
    return QuestionClassifier().analyze(QUESTION)


@pytest.fixture
def results():
    long_context = "Versioning in Amazon S3 keeps multiple variants of an object in the same bucket. " * 3
    return [
        SearchResult(
            rank_order=1,
            url="https://docs.aws.amazon.com/AmazonS3/latest/userguide/Versioning.html",
            title="Retaining multiple versions of objects with S3 Versioning",
            context=long_context,
            topic="general",
        ),
        SearchResult(
            rank_order=2,
            url="https://aws.amazon.com/blogs/storage/s3-versioning/",
            title="Blog: versioning tips",
            context="Turn on bucket versioning to protect objects from accidental deletes.",
            topic="reference_documentation",
        ),
        SearchResult(
            rank_order=3,
            url="https://example.com/random",
            title="Unrelated page",
            context="Nothing here.",
            topic="troubleshooting",
        ),
    ]


class TestRankingWeights:
    """Test ranking weight validation."""

    def test_defaults_sum_to_one(self):
        weights = RankingWeights()
        assert weights.relevance == 0.4
        assert weights.context == 0.0

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError, match="must sum to 1"):
            RankingWeights(relevance=0.5, service=0.5, title=0.5, quality=0.0)


class TestRank:
    """Test rank."""

    def test_orders_by_final_score(self, results, analysis):
        rankings = rank(results, analysis, QUESTION, primary_topics=["general", "reference_documentation"])

        assert [r.result.rank_order for r in rankings] == [1, 2, 3]
        scores = [r.final_score for r in rankings]
        assert scores == sorted(scores, reverse=True)

    def test_component_scores(self, results, analysis):
        rankings = rank(results, analysis, QUESTION, primary_topics=["general"])
        top, _, last = rankings

        assert top.relevance_score == 1.0
        assert top.service_match == 1.0
        assert top.title_match == 1.0
        assert top.quality_score == 1.0
        assert last.service_match == 0.0
        assert last.title_match == 0.0
        assert last.relevance_score == 0.0
        assert 0.0 <= last.final_score <= 1.0

    def test_is_deterministic(self, results, analysis):
        """Ranking the same input twice gives identical output."""
        first = rank(results, analysis, QUESTION, primary_topics=["general"])
        second = rank(results, analysis, QUESTION, primary_topics=["general"])

        assert first == second

    def test_input_order_does_not_matter(self, results, analysis):
        expected = rank(results, analysis, QUESTION, primary_topics=["general"])
        shuffled = list(results)
        random.Random(7).shuffle(shuffled)

        assert rank(shuffled, analysis, QUESTION, primary_topics=["general"]) == expected

    def test_ties_broken_by_rank_order_then_url(self, analysis):
        tied = [
            SearchResult(rank_order=1, url="https://docs.aws.amazon.com/b", title="x", context="y", topic="general"),
            SearchResult(rank_order=1, url="https://docs.aws.amazon.com/a", title="x", context="y", topic="general"),
        ]

        rankings = rank(tied, analysis, QUESTION)

        assert rankings[0].final_score == rankings[1].final_score
        assert [r.result.url for r in rankings] == ["https://docs.aws.amazon.com/a", "https://docs.aws.amazon.com/b"]

    def test_empty_results(self, analysis):
        assert rank([], analysis, QUESTION) == []


class TestHelpers:
    """Test ranking helpers."""

    def test_url_key(self):
        assert url_key("https://Docs.AWS.amazon.com/S3/") == url_key("https://docs.aws.amazon.com/s3")

    @pytest.mark.parametrize(
        "url,context,expected",
        [
            ("https://docs.aws.amazon.com/x", "a" * 100, 0.9),
            ("https://aws.amazon.com/blogs/x", "a" * 100, 0.7),
            ("https://example.com/x", "a" * 100, 0.5),
            ("https://repost.aws/questions/x", "a" * 100, 0.7),
            ("https://s3.amazonaws.com/bucket/x", "a" * 100, 0.7),
            ("https://evil-notamazon.com/x", "a" * 100, 0.5),
            ("https://fakeamazonaws.com/x", "a" * 100, 0.5),
            ("https://amazon.com.example.net/x", "a" * 100, 0.5),
            ("https://docs.aws.amazon.com/x", "short", 0.7),
            ("https://docs.aws.amazon.com/x", "a" * 250, 1.0),
        ],
    )
    def test_quality_score(self, url, context, expected):
        result = SearchResult(rank_order=1, url=url, title="t", context=context, topic="general")
        assert quality_score(result) == pytest.approx(expected)
