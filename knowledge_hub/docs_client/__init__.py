"""Documentation search backends."""

from knowledge_hub.docs_client.base import (
    ClientError,
    DocumentationClient,
    DocumentationClientFactory,
    DocumentationHit,
    ReadResponse,
    SearchResponse,
)
from knowledge_hub.docs_client.factory import create_documentation_client
from knowledge_hub.docs_client.http import HttpDocumentationClient, HttpDocumentationConfig
from knowledge_hub.docs_client.mock import MockDocumentationClient, MockDocumentationConfig

# Register all clients
DocumentationClientFactory.register("mock", MockDocumentationClient)
DocumentationClientFactory.register("http", HttpDocumentationClient)

__all__ = [
    "ClientError",
    "DocumentationClient",
    "DocumentationClientFactory",
    "DocumentationHit",
    "HttpDocumentationClient",
    "HttpDocumentationConfig",
    "MockDocumentationClient",
    "MockDocumentationConfig",
    "ReadResponse",
    "SearchResponse",
    "create_documentation_client",
]
