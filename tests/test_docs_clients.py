"""Tests for documentation clients."""

from unittest.mock import patch

import httpx
import pytest

from knowledge_hub.config import Settings
from knowledge_hub.docs_client import (
    DocumentationClientFactory,
    HttpDocumentationClient,
    HttpDocumentationConfig,
    MockDocumentationClient,
    create_documentation_client,
)
from knowledge_hub.docs_client.mock import CorpusEntry
from knowledge_hub.errors import ErrorCode

BASE_URL = "http://docs.test"


def _response(status_code: int = 200, **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", f"{BASE_URL}/search"), **kwargs)


class TestDocumentationClientFactory:
    """Test the documentation client factory."""

    def test_list_clients(self):
        clients = DocumentationClientFactory.list_clients()
        assert "mock" in clients
        assert "http" in clients

    def test_create_http_client(self):
        client = DocumentationClientFactory.create("http", base_url=BASE_URL, api_key="secret")

        assert isinstance(client, HttpDocumentationClient)
        assert client.config.base_url == BASE_URL
        assert client.client.headers["Authorization"] == "Bearer secret"

    def test_create_unknown_client(self):
        with pytest.raises(ValueError, match="Unknown documentation client 'unknown'"):
            DocumentationClientFactory.create("unknown")

    def test_create_from_settings(self):
        client = create_documentation_client(Settings(docs_client="http", docs_api_url=BASE_URL, docs_request_timeout=3))

        assert isinstance(client, HttpDocumentationClient)
        assert client.config.timeout == 3

    def test_http_client_requires_url(self):
        with pytest.raises(ValueError, match="Documentation API URL is required"):
            create_documentation_client(Settings(docs_client="http", docs_api_url=None))

    def test_default_is_mock(self):
        assert isinstance(create_documentation_client(Settings(docs_client="mock")), MockDocumentationClient)


class TestHttpDocumentationClient:
    """Test the HTTP documentation client."""

    @pytest.fixture
    def client(self):
        return HttpDocumentationClient(HttpDocumentationConfig(base_url=BASE_URL))

    @pytest.mark.asyncio
    async def test_search_success(self, client):
        """Test hits are parsed and tagged with the requested topic."""
        response = _response(
            json={
                "results": [
                    {
                        "rank_order": 1,
                        "url": "https://docs.aws.amazon.com/AmazonS3/latest/userguide/Versioning.html",
                        "title": "S3 Versioning",
                        "context": "Versioning keeps multiple variants of an object.",
                    }
                ]
            }
        )

        with patch.object(client.client, "post", return_value=response) as mock_post:
            result = await client.search_documentation("s3 versioning", ["general"], limit=5)

        assert result.success is True
        assert len(result.results) == 1
        assert result.results[0].topic == "general"
        mock_post.assert_called_once_with(
            "/search", json={"search_phrase": "s3 versioning", "topics": ["general"], "limit": 5}
        )

    @pytest.mark.asyncio
    async def test_malformed_hits_dropped(self, client):
        """Test hits with invalid URLs or rank orders are skipped."""
        response = _response(
            json={
                "results": [
                    {"rank_order": 1, "url": "not-a-url", "title": "Broken"},
                    {"rank_order": 0, "url": "https://docs.aws.amazon.com/a", "title": "Bad rank"},
                    "garbage",
                    {"rank_order": 2, "url": "https://docs.aws.amazon.com/b", "title": "Good"},
                ]
            }
        )

        with patch.object(client.client, "post", return_value=response):
            result = await client.search_documentation("query", ["general"])

        assert [hit.title for hit in result.results] == ["Good"]

    @pytest.mark.asyncio
    async def test_rate_limited(self, client):
        with patch.object(client.client, "post", return_value=_response(429)):
            result = await client.search_documentation("query", ["general"])

        assert result.success is False
        assert result.error.code == ErrorCode.RATE_LIMITED

    @pytest.mark.asyncio
    async def test_server_error(self, client):
        with patch.object(client.client, "post", return_value=_response(500)):
            result = await client.search_documentation("query", ["general"])

        assert result.error.code == ErrorCode.SEARCH_FAILED

    @pytest.mark.asyncio
    async def test_timeout(self, client):
        with patch.object(client.client, "post", side_effect=httpx.ReadTimeout("slow")):
            result = await client.search_documentation("query", ["general"])

        assert result.success is False
        assert result.error.code == ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    async def test_connection_failed(self, client):
        with patch.object(client.client, "post", side_effect=httpx.ConnectError("refused")):
            result = await client.search_documentation("query", ["general"])

        assert result.error.code == ErrorCode.CONNECTION_FAILED

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        with patch.object(client.client, "post", return_value=_response(content=b"<html>oops</html>")):
            result = await client.search_documentation("query", ["general"])

        assert result.error.code == ErrorCode.SEARCH_FAILED

    @pytest.mark.asyncio
    async def test_read_documentation_truncates(self, client):
        response = _response(json={"content": "x" * 50})

        with patch.object(client.client, "post", return_value=response):
            result = await client.read_documentation("https://docs.aws.amazon.com/a", max_length=10)

        assert result.content == "x" * 10
        assert result.truncated is True

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        with patch.object(client.client, "get", return_value=_response(200)):
            assert await client.health_check() is True

        with patch.object(client.client, "get", side_effect=httpx.ConnectError("refused")):
            assert await client.health_check() is False


class TestMockDocumentationClient:
    """Test the in-memory documentation client."""

    @pytest.fixture
    def client(self):
        return MockDocumentationClient()

    @pytest.mark.asyncio
    async def test_search_filters_by_topic(self, client):
        result = await client.search_documentation("create S3 bucket", ["general"])

        assert result.success is True
        assert result.results
        assert {hit.topic for hit in result.results} == {"general"}
        assert [hit.rank_order for hit in result.results] == list(range(1, len(result.results) + 1))
        assert result.results[0].url.endswith("create-bucket-overview.html")

    @pytest.mark.asyncio
    async def test_search_respects_limit(self, client):
        result = await client.search_documentation("S3 bucket", [], limit=2)
        assert len(result.results) == 2

    @pytest.mark.asyncio
    async def test_search_without_overlap(self, client):
        result = await client.search_documentation("asdkjhasd", ["general"])
        assert result.results == []

    @pytest.mark.asyncio
    async def test_custom_corpus(self):
        corpus = [CorpusEntry("general", "https://docs.aws.amazon.com/x", "Widgets", "All about widgets.")]
        client = MockDocumentationClient(corpus=corpus)

        result = await client.search_documentation("widgets", ["general"])

        assert [hit.url for hit in result.results] == ["https://docs.aws.amazon.com/x"]

    @pytest.mark.asyncio
    async def test_read_and_recommend(self, client):
        url = "https://docs.aws.amazon.com/lambda/latest/dg/configuration-timeout.html"

        page = await client.read_documentation(url)
        related = await client.recommend(url)

        assert page.content.startswith("# Configure Lambda function timeout")
        assert related.results
        assert url not in [hit.url for hit in related.results]
        assert {hit.topic for hit in related.results} == {"reference_documentation"}
