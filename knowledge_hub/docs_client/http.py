"""JSON-over-HTTP documentation client."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from knowledge_hub.errors import ErrorCode
from .base import ClientError, DocumentationClient, DocumentationHit, ReadResponse, SearchResponse

logger = logging.getLogger(__name__)


class HttpDocumentationConfig(BaseModel):
    """Configuration for the HTTP documentation client."""

    base_url: str = "http://localhost:8080"
    api_key: str | None = None
    timeout: float = 10.0


class HttpDocumentationClient(DocumentationClient):
    """Client for a documentation search gateway.

    The gateway exposes ``POST /search``, ``POST /read``, ``POST /recommend``
    and ``GET /health``. Transport failures are reported in the response
    rather than raised.
    """

    def __init__(self, config: HttpDocumentationConfig | None = None, **kwargs: Any) -> None:
        """Initialize HTTP documentation client.

        Args:
            config: Client configuration
            **kwargs: Additional configuration options
        """
        self.config = config or HttpDocumentationConfig(**kwargs)
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        self.client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            headers=headers,
        )

    async def search_documentation(self, query: str, topics: list[str], limit: int = 10) -> SearchResponse:
        """Search the gateway.

        Args:
            query: Search phrase
            topics: Backend topics to search in
            limit: Maximum number of hits

        Returns:
            SearchResponse with validated hits
        """
        payload = {"search_phrase": query, "topics": topics, "limit": limit}
        data, error = await self._post("/search", payload)
        if error:
            return SearchResponse(success=False, error=error)
        return self._parse_hits(data, topics)

    async def read_documentation(self, url: str, max_length: int | None = None) -> ReadResponse:
        payload: dict[str, Any] = {"url": url}
        if max_length is not None:
            payload["max_length"] = max_length

        data, error = await self._post("/read", payload)
        if error:
            return ReadResponse(success=False, error=error)

        content = str(data.get("content", ""))
        truncated = bool(data.get("truncated", False))
        if max_length is not None and len(content) > max_length:
            content = content[:max_length]
            truncated = True
        return ReadResponse(content=content, truncated=truncated)

    async def recommend(self, url: str) -> SearchResponse:
        data, error = await self._post("/recommend", {"url": url})
        if error:
            return SearchResponse(success=False, error=error)
        return self._parse_hits(data, [])

    async def health_check(self) -> bool:
        """Check if the gateway is healthy.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = await self.client.get("/health")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning(f"Documentation gateway health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.client.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> tuple[dict[str, Any], ClientError | None]:
        try:
            response = await self.client.post(path, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Documentation request to {path} timed out: {e}")
            return {}, ClientError(code=ErrorCode.TIMEOUT, message="Documentation request timed out")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"Documentation request to {path} failed with status {status}")
            if status == 429:
                return {}, ClientError(code=ErrorCode.RATE_LIMITED, message="Documentation rate limit exceeded")
            return {}, ClientError(code=ErrorCode.SEARCH_FAILED, message=f"Documentation backend returned {status}")
        except httpx.RequestError as e:
            logger.error(f"Documentation request to {path} failed: {e}")
            return {}, ClientError(code=ErrorCode.CONNECTION_FAILED, message="Could not reach documentation backend")
        except ValueError as e:
            logger.error(f"Documentation backend returned invalid JSON: {e}")
            return {}, ClientError(code=ErrorCode.SEARCH_FAILED, message="Invalid response from documentation backend")

        if not isinstance(data, dict):
            return {}, ClientError(code=ErrorCode.SEARCH_FAILED, message="Invalid response from documentation backend")
        return data, None

    @staticmethod
    def _parse_hits(data: dict[str, Any], topics: list[str]) -> SearchResponse:
        default_topic = topics[0] if len(topics) == 1 else None
        hits = []
        for raw in data.get("results", []):
            if not isinstance(raw, dict):
                continue
            try:
                hit = DocumentationHit.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Dropping malformed documentation hit: {e.errors()[0]['msg']}")
                continue
            if hit.topic is None and default_topic:
                hit.topic = default_topic
            hits.append(hit)
        return SearchResponse(results=hits)
