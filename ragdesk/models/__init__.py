"""ragdesk domain models -- re-exports all public model classes."""

from __future__ import annotations

from ragdesk.models.chat import Conversation, ConversationDetail, Message, MessageRole
from ragdesk.models.rag import (
    DocumentMetadata,
    DocumentStatus,
    SearchResult,
    VectorEntry,
    VectorEntryMetadata,
    VectorStoreStats,
)
from ragdesk.models.stream import StreamEventType, StreamPacket

__all__ = [
    "Conversation",
    "ConversationDetail",
    "DocumentMetadata",
    "DocumentStatus",
    "Message",
    "MessageRole",
    "SearchResult",
    "StreamEventType",
    "StreamPacket",
    "VectorEntry",
    "VectorEntryMetadata",
    "VectorStoreStats",
]
