"""Factory for creating documentation clients from configuration."""

from knowledge_hub.config import DocsClientType, Settings, get_settings
from .base import DocumentationClient, DocumentationClientFactory


def create_documentation_client(settings: Settings | None = None) -> DocumentationClient:
    """Create documentation client from configuration.

    Args:
        settings: Settings to use, defaults to the global settings

    Returns:
        Configured documentation client instance

    Raises:
        ValueError: If client configuration is invalid
    """
    settings = settings or get_settings()

    if settings.docs_client == DocsClientType.HTTP:
        from .http import HttpDocumentationConfig

        if not settings.docs_api_url:
            raise ValueError("Documentation API URL is required when using the http client")

        config = HttpDocumentationConfig(
            base_url=settings.docs_api_url,
            api_key=settings.docs_api_key,
            timeout=settings.docs_request_timeout,
        )
        return DocumentationClientFactory.create(DocsClientType.HTTP.value, config=config)

    elif settings.docs_client == DocsClientType.MOCK:
        return DocumentationClientFactory.create(DocsClientType.MOCK.value)

    else:
        raise ValueError(f"Unknown documentation client: {settings.docs_client}")
