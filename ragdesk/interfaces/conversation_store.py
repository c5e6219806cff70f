"""Abstract base class for conversation persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragdesk.models.chat import Conversation, ConversationDetail, Message, MessageRole


# Concrete implementation: SQLiteConversationStore (ragdesk/providers/conversation/)
class IConversationStore(ABC):
    """Contract for storing conversations and their messages."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create the schema if needed."""

    @abstractmethod
    async def create_conversation(self, title: str | None = None) -> Conversation:
        """Create and return a new, empty conversation."""

    @abstractmethod
    async def list_conversations(self) -> list[Conversation]:
        """Return all conversations, most recently updated first."""

    @abstractmethod
    async def get_conversation(self, conversation_id: str) -> ConversationDetail | None:
        """Return a conversation with all its messages, or ``None``."""

    @abstractmethod
    async def append_message(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        thought_process: str | None = None,
    ) -> Message:
        """Persist a message and bump the conversation's ``updated_at``.

        Raises
        ------
        ragdesk.utils.errors.NotFoundError
            If the conversation does not exist.
        """

    @abstractmethod
    async def recent_messages(self, conversation_id: str, limit: int = 20) -> list[Message]:
        """Return the newest *limit* messages ordered oldest to newest."""
