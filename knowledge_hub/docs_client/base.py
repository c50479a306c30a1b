"""Documentation client interface and factory pattern."""

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from knowledge_hub.errors import ErrorCode


class DocumentationHit(BaseModel):
    """A single search hit returned by a documentation backend."""

    rank_order: int = Field(ge=1)
    url: str
    title: str
    context: str = ""
    topic: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Documentation URL must be an absolute http(s) URL: {value!r}")
        return value


class ClientError(BaseModel):
    """Error reported by a documentation backend."""

    code: ErrorCode
    message: str


class SearchResponse(BaseModel):
    """Result from a documentation search."""

    success: bool = True
    results: list[DocumentationHit] = Field(default_factory=list)
    error: ClientError | None = None


class ReadResponse(BaseModel):
    """Result from reading a documentation page."""

    success: bool = True
    content: str = ""
    truncated: bool = False
    error: ClientError | None = None


class DocumentationClient(ABC):
    """Abstract base class for documentation search backends."""

    @abstractmethod
    async def search_documentation(self, query: str, topics: list[str], limit: int = 10) -> SearchResponse:
        """Search the documentation corpus.

        Args:
            query: Search phrase
            topics: Backend topics to search in
            limit: Maximum number of hits

        Returns:
            SearchResponse with hits, or an error describing the failure
        """
        pass

    @abstractmethod
    async def read_documentation(self, url: str, max_length: int | None = None) -> ReadResponse:
        """Fetch the content of a documentation page.

        Args:
            url: Page URL
            max_length: Maximum content length in characters

        Returns:
            ReadResponse with the page content
        """
        pass

    async def recommend(self, url: str) -> SearchResponse:
        """Find documentation pages related to a given page.

        Backends without a recommendation feature return no hits.
        """
        return SearchResponse()

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the backend is healthy and accessible.

        Returns:
            True if healthy, False otherwise
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None

    async def __aenter__(self) -> "DocumentationClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


class DocumentationClientFactory:
    """Factory for creating documentation clients."""

    _clients: dict[str, type[DocumentationClient]] = {}

    @classmethod
    def register(cls, name: str, client_class: type[DocumentationClient]) -> None:
        """Register a client class.

        Args:
            name: Client name (e.g., "mock", "http")
            client_class: Client class to register
        """
        cls._clients[name] = client_class

    @classmethod
    def create(cls, name: str, **kwargs: Any) -> DocumentationClient:
        """Create a client instance.

        Args:
            name: Client name
            **kwargs: Client-specific configuration

        Returns:
            DocumentationClient instance

        Raises:
            ValueError: If client name is not registered
        """
        if name not in cls._clients:
            available = ", ".join(cls._clients.keys())
            raise ValueError(f"Unknown documentation client '{name}'. Available: {available}")

        return cls._clients[name](**kwargs)

    @classmethod
    def list_clients(cls) -> list[str]:
        return list(cls._clients.keys())
