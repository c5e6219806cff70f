"""Abstract base class for streaming chat-model providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator

from ragdesk.utils.concurrency import CancellationToken


# Concrete implementation: OllamaChatProvider (ragdesk/providers/llm/)
class IChatProvider(ABC):
    """Contract for a local model runtime that streams chat completions.

    The raw chunks yielded by :meth:`stream_chat` are provider-shaped dicts;
    :class:`~ragdesk.pipeline.stream_normalizer.StreamNormalizer` turns them
    into :class:`~ragdesk.models.stream.StreamPacket` objects.
    """

    @abstractmethod
    def stream_chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        options: dict[str, Any] | None = None,
        cancellation_token: CancellationToken | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Stream raw response chunks for a chat request.

        Parameters
        ----------
        model:
            Model name known to the runtime.
        messages:
            ``[{"role": ..., "content": ...}, ...]`` with the system prompt first.
        options:
            Sampling options merged over the provider defaults.
        cancellation_token:
            Checked at every chunk boundary; once cancelled the provider
            stops reading and releases the connection.
        tools:
            Tool definitions in function-calling format.

        Raises
        ------
        ragdesk.utils.errors.StreamError
            If the runtime rejects the request or the stream breaks.
        """

    @abstractmethod
    async def list_models(self) -> list[dict[str, Any]]:
        """Return the models installed in the runtime."""

    @abstractmethod
    async def validate_connection(self) -> bool:
        """Return ``True`` if the runtime answers."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"ollama"``."""
