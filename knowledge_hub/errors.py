"""Error codes and exceptions shared across the question pipeline."""

from dataclasses import dataclass
from enum import Enum


DOCUMENTATION_HOME_URL = "https://docs.aws.amazon.com/"


class ErrorCode(str, Enum):
    """Stable error codes surfaced to callers."""

    # Input errors
    EMPTY_QUESTION = "EMPTY_QUESTION"
    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"
    OFFENSIVE_CONTENT = "OFFENSIVE_CONTENT"

    # Documentation backend errors
    CONNECTION_FAILED = "CONNECTION_FAILED"
    TIMEOUT = "TIMEOUT"
    RATE_LIMITED = "RATE_LIMITED"
    SEARCH_FAILED = "SEARCH_FAILED"

    # Pipeline-level errors
    DOCUMENTATION_UNAVAILABLE = "DOCUMENTATION_UNAVAILABLE"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


BACKEND_ERROR_CODES = frozenset(
    {
        ErrorCode.CONNECTION_FAILED,
        ErrorCode.TIMEOUT,
        ErrorCode.RATE_LIMITED,
        ErrorCode.SEARCH_FAILED,
    }
)

_SUGGESTIONS = {
    ErrorCode.EMPTY_QUESTION: "Type a question about an AWS service, for example 'How do I create an S3 bucket?'",
    ErrorCode.TOO_SHORT: "Add a few more words describing what you want to do.",
    ErrorCode.TOO_LONG: "Shorten the question and focus on a single problem.",
    ErrorCode.OFFENSIVE_CONTENT: "Rephrase the question without offensive language.",
    ErrorCode.CONNECTION_FAILED: "Please try again in a few moments.",
    ErrorCode.TIMEOUT: "Please try again in a few moments.",
    ErrorCode.RATE_LIMITED: "Please wait a moment before asking another question.",
    ErrorCode.SEARCH_FAILED: "Please try again or rephrase the question.",
    ErrorCode.DOCUMENTATION_UNAVAILABLE: (
        f"Please try again later, or browse the AWS documentation directly at {DOCUMENTATION_HOME_URL}"
    ),
    ErrorCode.SESSION_NOT_FOUND: "Start a new session and ask the question again.",
    ErrorCode.INTERNAL_ERROR: "Please try again. If the problem persists, rephrase the question.",
}


def suggestion_for(code: ErrorCode) -> str:
    """Return the next-step hint shown to users for an error code."""
    return _SUGGESTIONS.get(code, _SUGGESTIONS[ErrorCode.INTERNAL_ERROR])


@dataclass(frozen=True)
class ErrorDetail:
    """User-visible error carried by stage results."""

    code: ErrorCode
    message: str
    suggestion: str

    @classmethod
    def from_code(cls, code: ErrorCode, message: str) -> "ErrorDetail":
        return cls(code=code, message=message, suggestion=suggestion_for(code))


class KnowledgeHubError(Exception):
    """Base exception for knowledge hub errors."""

    def __init__(self, message: str, code: ErrorCode, user_message: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.user_message = user_message or message

    def to_detail(self) -> ErrorDetail:
        return ErrorDetail.from_code(self.code, self.user_message)


class DocumentationClientError(KnowledgeHubError):
    """Raised when a documentation backend call fails."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(f"Documentation backend error ({code.value}): {message}", code, message)


class SessionNotFoundError(KnowledgeHubError):
    """Raised when a session does not exist or has expired."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            f"Session {session_id} not found",
            ErrorCode.SESSION_NOT_FOUND,
            "Your session has expired. Please start a new conversation.",
        )
        self.session_id = session_id


class ConfigurationError(KnowledgeHubError):
    """Raised for malformed configuration detected at runtime."""

    def __init__(self, message: str) -> None:
        super().__init__(
            f"Configuration error: {message}",
            ErrorCode.INTERNAL_ERROR,
            "An internal error occurred while processing your question.",
        )
