"""Session and conversation history storage."""

from .base import ConversationEntry, Session, SessionStore
from .memory import InMemorySessionStore

__all__ = [
    "ConversationEntry",
    "InMemorySessionStore",
    "Session",
    "SessionStore",
]
