"""Pydantic request/response schemas for the ragdesk API.

Request schemas end with "Request", response schemas with "Response".
Domain models (``DocumentMetadata``, ``Conversation``...) are returned
directly where their shape already is the public contract.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ragdesk.models.chat import Conversation
from ragdesk.models.rag import DocumentMetadata


class ErrorResponse(BaseModel):
    """Sanitized error body returned by the error-handling middleware."""

    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str
    version: str
    providers: dict[str, Any] = Field(default_factory=dict)


class ModelsResponse(BaseModel):
    models: list[dict[str, Any]] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class InitChatRequest(BaseModel):
    title: str | None = Field(default=None, max_length=200)


class InitChatResponse(BaseModel):
    conversation_id: str


class ConversationListResponse(BaseModel):
    conversations: list[Conversation] = Field(default_factory=list)


class ChatStreamRequest(BaseModel):
    """Body of ``POST /api/chat/stream``.

    ``document_ids`` restricts retrieval to those documents; when omitted
    the whole store is searched (if it holds anything).
    """

    conversation_id: str
    message: str = Field(min_length=1)
    model: str | None = None
    document_ids: list[str] | None = None
    options: dict[str, Any] | None = None


class StopChatRequest(BaseModel):
    conversation_id: str


class StopChatResponse(BaseModel):
    stopped: bool


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class DocumentListResponse(BaseModel):
    documents: list[DocumentMetadata] = Field(default_factory=list)


class RemoveDocumentResponse(BaseModel):
    removed: bool


class DocumentStatsResponse(BaseModel):
    total_vectors: int = Field(ge=0)
    documents: int = Field(ge=0)
