"""Ollama chat provider adapter.

Streams Ollama's native ``/api/chat`` endpoint with ``httpx``.  The native
endpoint (rather than the OpenAI-compatible ``/v1`` one) is used because
it reports reasoning text in ``message.thinking`` separately from the
answer, which the stream normalizer turns into ``thought`` packets.

Each response line is one JSON chunk::

    {"model": "deepseek-r1", "message": {"role": "assistant", "content": "Hi"}, "done": false}
    ...
    {"model": "deepseek-r1", "done": true, "total_duration": 123456789}
"""

from __future__ import annotations

import json
from typing import Any, AsyncIterator

import httpx
import structlog

from ragdesk.config.settings import Settings
from ragdesk.interfaces.llm_provider import IChatProvider
from ragdesk.utils.concurrency import CancellationToken
from ragdesk.utils.errors import ProviderUnavailableError, StreamError

logger = structlog.get_logger(logger_name=__name__)


class OllamaChatProvider(IChatProvider):
    """Chat provider backed by a local Ollama server.

    Parameters
    ----------
    settings:
        Supplies the base URL, keep-alive, context size, temperature and
        stream timeout.
    client:
        Optional pre-built ``httpx.AsyncClient`` whose ``base_url`` points
        at the Ollama server.  Tests pass one with a ``MockTransport``.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            base_url=self._base_url,
            # generation can pause for a long time between tokens while the
            # model loads, so only the read timeout is generous
            timeout=httpx.Timeout(settings.chat_timeout_seconds, connect=10.0),
        )

    # ------------------------------------------------------------------
    # IChatProvider implementation
    # ------------------------------------------------------------------

    async def stream_chat(
        self,
        model: str,
        messages: list[dict[str, Any]],
        options: dict[str, Any] | None = None,
        cancellation_token: CancellationToken | None = None,
        tools: list[dict[str, Any]] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": True,
            "keep_alive": self._settings.chat_keep_alive,
            "options": {
                "num_ctx": self._settings.chat_num_ctx,
                "temperature": self._settings.chat_temperature,
                **(options or {}),
            },
        }
        if tools:
            payload["tools"] = tools

        logger.info("ollama_chat_start", model=model, message_count=len(messages))
        try:
            async with self._client.stream("POST", "/api/chat", json=payload) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise StreamError(
                        message=f"Ollama returned HTTP {response.status_code}: {body[:200]}",
                        provider_name=self.get_provider_name(),
                    )

                async for line in response.aiter_lines():
                    if cancellation_token is not None and cancellation_token.cancelled:
                        logger.info("ollama_chat_cancelled", model=model)
                        return
                    if not line.strip():
                        continue

                    chunk = json.loads(line)
                    if "error" in chunk:
                        raise StreamError(
                            message=str(chunk["error"]),
                            provider_name=self.get_provider_name(),
                        )
                    yield chunk
                    if chunk.get("done"):
                        return
        except httpx.HTTPError as exc:
            raise StreamError(
                message=f"Ollama stream failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except json.JSONDecodeError as exc:
            raise StreamError(
                message=f"Ollama sent an unparseable chunk: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def list_models(self) -> list[dict[str, Any]]:
        """List installed models via the native ``/api/tags`` endpoint."""
        try:
            response = await self._client.get("/api/tags", timeout=10.0)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ProviderUnavailableError(
                message=f"Could not list Ollama models: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        models = response.json().get("models", [])
        return [
            {
                "name": item.get("name", ""),
                "size": item.get("size"),
                "modified_at": item.get("modified_at"),
                "details": item.get("details", {}),
            }
            for item in models
        ]

    async def validate_connection(self) -> bool:
        """Check that the Ollama server is running and reachable."""
        if not self._base_url:
            return False
        try:
            response = await self._client.get("/api/tags", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    def get_provider_name(self) -> str:
        return "ollama"

    async def aclose(self) -> None:
        await self._client.aclose()
