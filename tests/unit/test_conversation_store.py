"""Unit tests for the SQLite conversation store."""

from __future__ import annotations

from pathlib import Path

import pytest

from ragdesk.models.chat import MessageRole
from ragdesk.providers.conversation.sqlite_conversation_store import SQLiteConversationStore
from ragdesk.utils.errors import NotFoundError


class TestConversations:
    @pytest.mark.asyncio
    async def test_create_uses_default_title(self, conversation_store: SQLiteConversationStore) -> None:
        conversation = await conversation_store.create_conversation()
        assert conversation.title == "New Conversation"

    @pytest.mark.asyncio
    async def test_create_with_title(self, conversation_store: SQLiteConversationStore) -> None:
        conversation = await conversation_store.create_conversation("Tax questions")
        detail = await conversation_store.get_conversation(conversation.id)
        assert detail.conversation.title == "Tax questions"

    @pytest.mark.asyncio
    async def test_get_unknown_returns_none(self, conversation_store: SQLiteConversationStore) -> None:
        assert await conversation_store.get_conversation("missing") is None

    @pytest.mark.asyncio
    async def test_list_orders_by_last_activity(self, conversation_store: SQLiteConversationStore) -> None:
        older = await conversation_store.create_conversation("older")
        newer = await conversation_store.create_conversation("newer")
        await conversation_store.append_message(older.id, MessageRole.USER, "bump")

        listed = await conversation_store.list_conversations()

        assert [c.id for c in listed] == [older.id, newer.id]

    @pytest.mark.asyncio
    async def test_initialize_is_idempotent(self, tmp_path: Path) -> None:
        store = SQLiteConversationStore(tmp_path / "nested" / "chat.db")
        await store.initialize()
        conversation = await store.create_conversation()
        await store.initialize()

        assert (await store.get_conversation(conversation.id)) is not None


class TestMessages:
    @pytest.mark.asyncio
    async def test_append_and_read_back_in_order(self, conversation_store: SQLiteConversationStore) -> None:
        conversation = await conversation_store.create_conversation()
        await conversation_store.append_message(conversation.id, MessageRole.USER, "question")
        await conversation_store.append_message(
            conversation.id, MessageRole.ASSISTANT, "answer", thought_process="reasoning"
        )

        detail = await conversation_store.get_conversation(conversation.id)

        assert [(m.role, m.content) for m in detail.messages] == [
            (MessageRole.USER, "question"),
            (MessageRole.ASSISTANT, "answer"),
        ]
        assert detail.messages[0].thought_process is None
        assert detail.messages[1].thought_process == "reasoning"

    @pytest.mark.asyncio
    async def test_append_to_unknown_conversation_raises(
        self, conversation_store: SQLiteConversationStore
    ) -> None:
        with pytest.raises(NotFoundError):
            await conversation_store.append_message("missing", MessageRole.USER, "hello")

    @pytest.mark.asyncio
    async def test_recent_messages_returns_latest_oldest_first(
        self, conversation_store: SQLiteConversationStore
    ) -> None:
        conversation = await conversation_store.create_conversation()
        for i in range(5):
            await conversation_store.append_message(conversation.id, MessageRole.USER, f"m{i}")

        recent = await conversation_store.recent_messages(conversation.id, limit=3)

        assert [m.content for m in recent] == ["m2", "m3", "m4"]

    @pytest.mark.asyncio
    async def test_messages_are_scoped_to_conversation(
        self, conversation_store: SQLiteConversationStore
    ) -> None:
        first = await conversation_store.create_conversation()
        second = await conversation_store.create_conversation()
        await conversation_store.append_message(first.id, MessageRole.USER, "for first")

        assert await conversation_store.recent_messages(second.id) == []

    @pytest.mark.asyncio
    async def test_persists_across_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "chat.db"
        store = SQLiteConversationStore(path)
        await store.initialize()
        conversation = await store.create_conversation()
        await store.append_message(conversation.id, MessageRole.USER, "remember me")

        reopened = SQLiteConversationStore(path)
        await reopened.initialize()
        detail = await reopened.get_conversation(conversation.id)

        assert detail.messages[0].content == "remember me"
