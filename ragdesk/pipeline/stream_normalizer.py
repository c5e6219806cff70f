"""Normalizes a raw model chat stream into :class:`StreamPacket` objects.

Raw chunks follow Ollama's ``/api/chat`` shape.  Each chunk is classified
in priority order:

    1. ``message.tool_calls``  -> one ``tool_start`` per call, next chunk
    2. ``message.thinking``    -> one ``thought``, next chunk
    3. ``message.content``     -> one ``token`` (counted), keep classifying
    4. ``done``                -> one ``done`` with totals

An exception raised by the raw stream becomes a single ``error`` packet
and ends the normalized stream.  The normalizer performs no I/O and keeps
no state other than the per-stream token counter.
"""

from __future__ import annotations

from typing import Any, AsyncIterator

import structlog

from ragdesk.models.stream import StreamEventType, StreamPacket

logger = structlog.get_logger(logger_name=__name__)


class StreamNormalizer:
    """Translates provider chunks into the uniform packet protocol."""

    async def normalize(
        self,
        raw_stream: AsyncIterator[dict[str, Any]],
    ) -> AsyncIterator[StreamPacket]:
        total_tokens = 0

        try:
            async for chunk in raw_stream:
                message = chunk.get("message") or {}

                tool_calls = message.get("tool_calls") or []
                if tool_calls:
                    for call in tool_calls:
                        function = call.get("function") or {}
                        yield StreamPacket.create(
                            StreamEventType.TOOL_START,
                            {
                                "tool": function.get("name") or "unknown",
                                "args": function.get("arguments") or {},
                            },
                        )
                    continue

                thinking = message.get("thinking")
                if thinking:
                    yield StreamPacket.create(StreamEventType.THOUGHT, thinking)
                    continue

                content = message.get("content")
                if content:
                    total_tokens += 1
                    yield StreamPacket.create(StreamEventType.TOKEN, content)

                if chunk.get("done"):
                    yield StreamPacket.create(
                        StreamEventType.DONE,
                        {
                            "totalTokens": total_tokens,
                            "totalDuration": chunk.get("total_duration") or 0,
                            "model": chunk.get("model") or "unknown",
                        },
                    )
        except Exception as exc:
            logger.error("stream_failed", error=str(exc), tokens_so_far=total_tokens)
            yield StreamPacket.create(StreamEventType.ERROR, {"message": str(exc)})
