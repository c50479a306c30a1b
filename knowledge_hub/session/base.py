"""Session store interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class ConversationEntry:
    """One question and answer exchange within a session."""

    question: str
    answer: str
    sources: list[str]
    response_time_ms: float
    timestamp: datetime


@dataclass
class Session:
    """A conversation session."""

    session_id: str
    created_at: datetime
    last_activity: datetime
    expires_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)
    conversations: list[ConversationEntry] = field(default_factory=list)

    @property
    def question_count(self) -> int:
        return len(self.conversations)


class SessionStore(ABC):
    """Abstract base class for session and conversation history storage."""

    @abstractmethod
    async def create_session(self, metadata: dict[str, Any] | None = None) -> str:
        """Create a session.

        Args:
            metadata: Request metadata stored with the session

        Returns:
            The new session id
        """
        pass

    @abstractmethod
    async def get_session(self, session_id: str) -> Session | None:
        """Get an active session, or None if it does not exist or has expired."""
        pass

    @abstractmethod
    async def append_conversation(
        self,
        session_id: str,
        question: str,
        answer: str,
        sources: list[str],
        response_time_ms: float,
    ) -> None:
        """Record an exchange in a session.

        Raises:
            SessionNotFoundError: If the session does not exist or has expired
        """
        pass

    @abstractmethod
    async def get_history(self, session_id: str, limit: int | None = None) -> list[ConversationEntry]:
        """Get the most recent exchanges of a session, oldest first.

        Args:
            session_id: Session id
            limit: Maximum number of exchanges, all when None

        Returns:
            Exchanges in chronological order; empty for unknown sessions
        """
        pass

    @abstractmethod
    async def delete_session(self, session_id: str) -> bool:
        pass

    @abstractmethod
    async def cleanup_expired_sessions(self) -> int:
        """Remove expired sessions.

        Returns:
            Number of sessions removed
        """
        pass
