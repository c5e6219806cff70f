"""Conversation and message models persisted by the conversation store."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class MessageRole(str, Enum):  # noqa: UP042
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


class Conversation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    title: str = "New Conversation"
    summary: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Message(BaseModel):
    """A single turn in a conversation.

    ``thought_process`` holds the model's reasoning text for assistant
    messages and is ``None`` when the model produced none.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    conversation_id: str
    role: MessageRole
    content: str
    thought_process: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    def to_chat_message(self) -> dict[str, str]:
        """Shape expected by the chat provider's ``messages`` list."""
        return {"role": self.role.value, "content": self.content}


class ConversationDetail(BaseModel):
    """A conversation together with its full message history."""

    model_config = ConfigDict(frozen=True)

    conversation: Conversation
    messages: list[Message] = Field(default_factory=list)
