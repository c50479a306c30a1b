"""In-memory session store."""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from knowledge_hub.errors import SessionNotFoundError
from .base import ConversationEntry, Session, SessionStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySessionStore(SessionStore):
    """Keeps sessions in a dict for the lifetime of the process.

    Sessions expire after ``ttl_seconds`` without activity. Each recorded
    exchange extends the session.
    """

    def __init__(
        self,
        ttl_seconds: float = 24 * 60 * 60,
        max_history: int = 100,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.ttl = timedelta(seconds=ttl_seconds)
        self.max_history = max_history
        self._clock = clock
        self._sessions: dict[str, Session] = {}

    async def create_session(self, metadata: dict[str, Any] | None = None) -> str:
        now = self._clock()
        session_id = str(uuid.uuid4())
        self._sessions[session_id] = Session(
            session_id=session_id,
            created_at=now,
            last_activity=now,
            expires_at=now + self.ttl,
            metadata=dict(metadata or {}),
        )
        logger.info(f"Created session {session_id}")
        return session_id

    async def get_session(self, session_id: str) -> Session | None:
        session = self._sessions.get(session_id)
        if session is None or session.expires_at <= self._clock():
            return None
        return session

    async def append_conversation(
        self,
        session_id: str,
        question: str,
        answer: str,
        sources: list[str],
        response_time_ms: float,
    ) -> None:
        session = await self.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)

        now = self._clock()
        session.conversations.append(
            ConversationEntry(
                question=question,
                answer=answer,
                sources=list(sources),
                response_time_ms=response_time_ms,
                timestamp=now,
            )
        )
        if len(session.conversations) > self.max_history:
            session.conversations = session.conversations[-self.max_history:]
        session.last_activity = now
        session.expires_at = now + self.ttl

    async def get_history(self, session_id: str, limit: int | None = None) -> list[ConversationEntry]:
        session = await self.get_session(session_id)
        if session is None:
            return []
        if limit is None:
            return list(session.conversations)
        return session.conversations[-limit:] if limit > 0 else []

    async def delete_session(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def cleanup_expired_sessions(self) -> int:
        now = self._clock()
        expired = [sid for sid, session in self._sessions.items() if session.expires_at <= now]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)
