"""Conversation history storage keyed by A2A context id."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from llm_proxy_agent.models.a2a import Message


class ConversationHistoryStore(Protocol):
    """Ordered message history per conversation context."""

    def get(self, context_id: str) -> list[Message]:
        """Return the messages of a context in order (empty if unknown)."""
        ...

    def append(self, context_id: str, message: Message) -> None:
        """Append a message to a context, creating it if needed."""
        ...


@dataclass
class _ContextHistory:
    messages: list[Message] = field(default_factory=list)
    last_activity: datetime = field(default_factory=lambda: datetime.now(UTC))

    def touch(self) -> None:
        self.last_activity = datetime.now(UTC)


class InMemoryHistoryStore:
    """In-memory history store that forgets idle contexts."""

    def __init__(self, context_timeout_minutes: int = 60):
        """Initialize history store.

        Args:
            context_timeout_minutes: Minutes of inactivity before a context is dropped
        """
        self.contexts: dict[str, _ContextHistory] = {}
        self.context_timeout = timedelta(minutes=context_timeout_minutes)

    def get(self, context_id: str) -> list[Message]:
        """Return a copy of the messages stored for a context."""
        self._cleanup_expired_contexts()

        history = self.contexts.get(context_id)
        if history is None:
            return []

        history.touch()
        return list(history.messages)

    def append(self, context_id: str, message: Message) -> None:
        """Append a message to a context."""
        self._cleanup_expired_contexts()

        history = self.contexts.setdefault(context_id, _ContextHistory())
        history.messages.append(message)
        history.touch()

    def delete(self, context_id: str) -> bool:
        """Delete a context.

        Returns:
            True if the context was deleted, False if not found
        """
        return self.contexts.pop(context_id, None) is not None

    def context_count(self) -> int:
        """Get current number of live contexts."""
        self._cleanup_expired_contexts()
        return len(self.contexts)

    def _cleanup_expired_contexts(self) -> None:
        current_time = datetime.now(UTC)
        expired = [
            context_id
            for context_id, history in self.contexts.items()
            if current_time - history.last_activity > self.context_timeout
        ]

        for context_id in expired:
            del self.contexts[context_id]
