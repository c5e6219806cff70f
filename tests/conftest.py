"""Shared pytest fixtures for the ragdesk test suite."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, AsyncIterator

import pytest
import pytest_asyncio

from ragdesk.config.settings import Settings
from ragdesk.interfaces.embedding_provider import IEmbeddingProvider
from ragdesk.interfaces.llm_provider import IChatProvider
from ragdesk.models.rag import VectorEntry, VectorEntryMetadata
from ragdesk.providers.conversation.sqlite_conversation_store import SQLiteConversationStore
from ragdesk.providers.vector_store.json_vector_store import JsonVectorStore
from ragdesk.utils.concurrency import CancellationToken
from ragdesk.utils.errors import EmbeddingError, StreamError

FIXED_VECTOR = [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8]

_LOREM_SENTENCE = (
    "Lorem ipsum dolor sit amet, consectetur adipiscing elit. "
    "Sed do eiusmod tempor incididunt ut labore et dolore magna aliqua. "
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class StubEmbeddingProvider(IEmbeddingProvider):
    """Returns a fixed 8-dim vector; can be told to fail on given call numbers."""

    def __init__(
        self,
        vector: list[float] | None = None,
        fail_on_calls: set[int] | None = None,
        delays: dict[str, float] | None = None,
    ) -> None:
        self._vector = vector or list(FIXED_VECTOR)
        self._fail_on_calls = fail_on_calls or set()
        self._delays = delays or {}
        self.calls: list[str] = []

    async def embed(self, text: str, model: str | None = None) -> list[float]:
        self.calls.append(text)
        for marker, delay in self._delays.items():
            if marker in text:
                await asyncio.sleep(delay)
        if len(self.calls) in self._fail_on_calls:
            raise EmbeddingError(message="stub failure", provider_name="stub", model="stub-embed")
        return list(self._vector)

    def get_model_name(self) -> str:
        return "stub-embed"

    def get_provider_name(self) -> str:
        return "stub"

    def is_available(self) -> bool:
        return True


class FakeChatProvider(IChatProvider):
    """Replays scripted raw chunks and honours the cancellation token.

    ``fail_after`` raises a StreamError after that many chunks were yielded.
    """

    def __init__(
        self,
        chunks: list[dict[str, Any]] | None = None,
        fail_after: int | None = None,
        models: list[dict[str, Any]] | None = None,
    ) -> None:
        self._chunks = chunks if chunks is not None else [
            {"message": {"role": "assistant", "content": "Hello"}, "done": False},
            {"message": {"role": "assistant", "content": " world"}, "done": False},
            {"model": "fake-model", "done": True, "total_duration": 42},
        ]
        self._fail_after = fail_after
        self._models = models or [{"name": "deepseek-r1:latest"}]
        self.calls: list[dict[str, Any]] = []

    async def stream_chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        options: dict[str, Any] | None = None,
        cancellation_token: CancellationToken | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        self.calls.append({"model": model, "messages": messages, "options": options, "tools": tools})
        for index, chunk in enumerate(self._chunks):
            if cancellation_token is not None and cancellation_token.cancelled:
                return
            if self._fail_after is not None and index >= self._fail_after:
                raise StreamError(message="connection dropped", provider_name="fake")
            yield chunk

    async def list_models(self) -> list[dict[str, Any]]:
        return self._models

    async def validate_connection(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return "fake"


def make_entry(
    document_id: str,
    embedding: list[float],
    text: str = "chunk text",
    chunk_index: int = 0,
    filename: str = "doc.txt",
) -> VectorEntry:
    return VectorEntry(
        document_id=document_id,
        text=text,
        embedding=embedding,
        metadata=VectorEntryMetadata(filename=filename, chunk_index=chunk_index),
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def lorem_1200() -> str:
    """Exactly 1200 characters of lorem-ipsum prose."""
    text = (_LOREM_SENTENCE * 20)[:1200]
    assert len(text) == 1200
    return text


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        ollama_base_url="http://ollama.test",
        vector_store_path=str(tmp_path / "vectors" / "store.json"),
        conversation_db_path=str(tmp_path / "conversations.db"),
        upload_dir=str(tmp_path / "uploads"),
        plugin_root_dir=str(tmp_path / "files"),
    )


@pytest.fixture
def stub_embedder() -> StubEmbeddingProvider:
    return StubEmbeddingProvider()


@pytest.fixture
def fake_chat_provider() -> FakeChatProvider:
    return FakeChatProvider()


@pytest.fixture
def vector_store(tmp_path: Path) -> JsonVectorStore:
    return JsonVectorStore(str(tmp_path / "vectors" / "store.json"))


@pytest_asyncio.fixture
async def conversation_store(tmp_path: Path) -> SQLiteConversationStore:
    store = SQLiteConversationStore(tmp_path / "conversations.db")
    await store.initialize()
    return store
