"""Tests for the HTTP API."""

from unittest.mock import patch

import pytest
from aiohttp import test_utils

from knowledge_hub.config import Settings
from knowledge_hub.docs_client import MockDocumentationClient
from knowledge_hub.pipeline import build_pipeline
from knowledge_hub.web_server import WebServer


@pytest.fixture
def server():
    pipeline = build_pipeline(Settings(), client=MockDocumentationClient())
    return WebServer(pipeline, port=0)


class TestWebServer:
    """Test the web server routes."""

    @pytest.mark.asyncio
    async def test_health(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.get("/health")
            data = await response.json()

        assert response.status == 200
        assert data["status"] == "healthy"
        assert data["documentation_backend"] is True

    @pytest.mark.asyncio
    async def test_health_degraded(self, server):
        backend = server.pipeline.search_service.client
        with patch.object(backend, "health_check", return_value=False):
            async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
                response = await client.get("/health")
                data = await response.json()

        assert data["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_ask_question(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.post(
                "/api/questions", json={"question": "How do I create an S3 bucket with versioning?"}
            )
            data = await response.json()

        assert response.status == 200
        assert data["success"] is True
        assert data["analysis"]["question_type"] == "howto"
        assert data["answer"]["answer_type"] == "howto"
        assert data["answer"]["sources"]
        assert data["session_id"]

    @pytest.mark.asyncio
    async def test_invalid_question(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.post("/api/questions", json={"question": ""})
            data = await response.json()

        assert response.status == 400
        assert data["success"] is False
        assert data["error"]["code"] == "EMPTY_QUESTION"
        assert data["error"]["suggestion"]

    @pytest.mark.asyncio
    async def test_invalid_json_body(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            bad_json = await client.post("/api/questions", data="not json")
            not_object = await client.post("/api/questions", json=["question"])

        assert bad_json.status == 400
        assert not_object.status == 400

    @pytest.mark.asyncio
    async def test_stage_endpoints(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            validation = await (await client.post("/api/questions/validate", json={"question": "ab"})).json()
            normalization = await (await client.post("/api/questions/normalize", json={"question": "lamda  timeout"})).json()
            analysis = await (
                await client.post("/api/questions/analyze", json={"question": "Lambda fails with a timeout error"})
            ).json()

        assert validation["is_valid"] is False
        assert validation["errors"][0]["code"] == "TOO_SHORT"
        assert normalization["normalized"] == "Lambda timeout"
        assert analysis["question_type"] == "troubleshooting"

    @pytest.mark.asyncio
    async def test_session_history(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            created = await client.post("/api/sessions")
            session_id = (await created.json())["session_id"]
            await client.post(
                "/api/questions",
                json={"question": "How do I create an S3 bucket?", "session_id": session_id},
            )
            response = await client.get(f"/api/sessions/{session_id}/history", params={"limit": "5"})
            data = await response.json()

        assert created.status == 201
        assert response.status == 200
        assert [entry["question"] for entry in data["history"]] == ["How do I create an S3 bucket?"]

    @pytest.mark.asyncio
    async def test_history_errors(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            missing = await client.get("/api/sessions/unknown/history")
            session_id = (await (await client.post("/api/sessions")).json())["session_id"]
            bad_limit = await client.get(f"/api/sessions/{session_id}/history", params={"limit": "many"})

        assert missing.status == 404
        assert bad_limit.status == 400

    @pytest.mark.asyncio
    async def test_cache_endpoints(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            await client.post("/api/questions", json={"question": "How do I create an S3 bucket?"})
            stats = await (await client.get("/api/search/cache")).json()
            cleared = await client.delete("/api/search/cache")
            after = await (await client.get("/api/search/cache")).json()

        assert stats["size"] == 1
        assert cleared.status == 200
        assert after["size"] == 0

    @pytest.mark.asyncio
    async def test_get_and_delete_session(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            session_id = (await (await client.post("/api/sessions")).json())["session_id"]
            await client.post(
                "/api/questions",
                json={"question": "How do I create an S3 bucket?", "session_id": session_id},
            )
            session = await client.get(f"/api/sessions/{session_id}")
            session_data = await session.json()
            deleted = await client.delete(f"/api/sessions/{session_id}")
            after = await client.get(f"/api/sessions/{session_id}")
            deleted_again = await client.delete(f"/api/sessions/{session_id}")

        assert session.status == 200
        assert session_data["session_id"] == session_id
        assert session_data["question_count"] == 1
        assert deleted.status == 200
        assert after.status == 404
        assert deleted_again.status == 404

    @pytest.mark.asyncio
    async def test_search(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.post(
                "/api/search",
                json={"question": "How do I create an S3 bucket with versioning?", "topics": ["general"]},
            )
            data = await response.json()

        assert response.status == 200
        assert data["success"] is True
        assert data["strategy"]["primary_topics"] == ["general"]
        assert data["results"]
        assert "answer" not in data

    @pytest.mark.asyncio
    async def test_search_rejects_bad_input(self, server):
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            too_short = await client.post("/api/search", json={"question": "ab"})
            await too_short.read()
            bad_topics = await client.post("/api/search", json={"question": "S3 bucket", "topics": "general"})
            bad_limit = await client.post("/api/search", json={"question": "S3 bucket", "max_results": 0})

        assert too_short.status == 400
        assert (await too_short.json())["error"]["code"] == "TOO_SHORT"
        assert bad_topics.status == 400
        assert bad_limit.status == 400

    @pytest.mark.asyncio
    async def test_related_documentation(self, server):
        url = "https://docs.aws.amazon.com/AmazonS3/latest/userguide/Versioning.html"
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.post("/api/search/related", json={"url": url})
            data = await response.json()
            missing = await client.post("/api/search/related", json={})

        assert response.status == 200
        urls = [result["url"] for result in data["results"]]
        assert "https://docs.aws.amazon.com/AmazonS3/latest/userguide/create-bucket-overview.html" in urls
        assert url not in urls
        assert missing.status == 400

    @pytest.mark.asyncio
    async def test_read_documentation(self, server):
        url = "https://docs.aws.amazon.com/AmazonS3/latest/userguide/Versioning.html"
        async with test_utils.TestClient(test_utils.TestServer(server.app)) as client:
            response = await client.post("/api/documentation/read", json={"url": url, "max_length": 20})
            data = await response.json()
            bad_length = await client.post("/api/documentation/read", json={"url": url, "max_length": "long"})

        assert response.status == 200
        assert data["content"] == "# Retaining multiple"
        assert data["truncated"] is True
        assert bad_length.status == 400
