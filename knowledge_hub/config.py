"""Configuration management using pydantic-settings."""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DocsClientType(str, Enum):
    """Supported documentation search backends."""

    MOCK = "mock"
    HTTP = "http"


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Documentation Backend Configuration
    docs_client: DocsClientType = Field(
        default=DocsClientType.MOCK,
        description="Documentation search backend to use",
    )
    docs_api_url: str | None = Field(
        default=None,
        description="Base URL of the documentation search gateway",
    )
    docs_api_key: str | None = Field(
        default=None,
        description="API key sent to the documentation search gateway",
    )
    docs_request_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for a single documentation backend call",
    )

    # Question Validation Configuration
    min_question_length: int = Field(default=3, description="Minimum trimmed question length")
    max_question_length: int = Field(default=2000, description="Maximum trimmed question length")
    enable_profanity_filter: bool = Field(default=True, description="Reject offensive questions")
    offensive_terms: list[str] = Field(
        default_factory=lambda: ["fuck", "shit", "cunt", "asshole"],
        description="Substrings treated as offensive content",
    )
    enable_spell_check: bool = Field(default=True, description="Correct common service misspellings")
    supported_languages: list[str] = Field(default_factory=lambda: ["en"])

    # Question Analysis Configuration
    confidence_threshold: float = Field(
        default=0.6,
        description="Analysis confidence below which a clarification is suggested",
    )
    simple_token_threshold: int = Field(default=12, description="Token count below which a question can be simple")
    complex_token_threshold: int = Field(default=40, description="Token count above which a question is complex")
    question_type_priority: list[str] = Field(
        default_factory=lambda: [
            "troubleshooting",
            "howto",
            "technical",
            "comparison",
            "conceptual",
            "pricing",
            "security",
            "performance",
            "integration",
        ],
        description="Tie-break order for question types with equal keyword scores",
    )

    # Search Configuration
    max_primary_topics: int = Field(default=3)
    max_fallback_topics: int = Field(default=2)
    fallback_topic_pool: list[str] = Field(
        default_factory=lambda: ["general", "reference_documentation", "troubleshooting"],
        description="Topics eligible as fallbacks, in preference order",
    )
    min_results_before_fallback: int = Field(default=3)
    search_timeout_ceiling: float = Field(default=30.0, description="Upper bound for a search deadline in seconds")
    max_concurrent_requests: int = Field(
        default=5,
        description="Outstanding documentation backend calls allowed across all searches",
    )
    retry_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=0.5)
    retry_max_delay: float = Field(default=8.0)
    search_cache_ttl_seconds: float = Field(default=600.0)
    search_cache_max_entries: int = Field(default=1000)

    # Answer Configuration
    answer_max_sources: int = Field(default=5)
    answer_min_score: float = Field(default=0.1)
    answer_max_length: int = Field(default=4000)

    # Session Configuration
    session_ttl_seconds: float = Field(default=24 * 60 * 60, description="Idle period before a session expires")
    session_cleanup_interval: float = Field(default=60 * 60)
    history_context_size: int = Field(default=5)

    # Application Configuration
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=3000)
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )

    def validate_docs_client_config(self) -> None:
        """Validate that the selected documentation backend is fully configured."""
        if self.docs_client == DocsClientType.HTTP and not self.docs_api_url:
            raise ValueError("Documentation API URL is required when using the http client")
        if self.min_question_length > self.max_question_length:
            raise ValueError("min_question_length must not exceed max_question_length")


# Global settings instance - lazy loaded
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
