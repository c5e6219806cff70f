"""Conversation persistence adapters."""

from ragdesk.providers.conversation.sqlite_conversation_store import SQLiteConversationStore

__all__ = ["SQLiteConversationStore"]
