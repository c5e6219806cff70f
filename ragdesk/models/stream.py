"""The normalized packet protocol streamed to chat clients.

Every event coming out of the model -- answer tokens, reasoning text, tool
calls, completion, failure -- is wrapped in a :class:`StreamPacket` with a
fresh id and an emission timestamp in milliseconds.
"""

from __future__ import annotations

import json
import time
import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class StreamEventType(str, Enum):  # noqa: UP042
    TOKEN = "token"
    THOUGHT = "thought"
    TOOL_START = "tool_start"
    TOOL_RESULT = "tool_result"
    ERROR = "error"
    DONE = "done"


def _now_ms() -> int:
    return int(time.time() * 1000)


class StreamPacket(BaseModel):
    """One normalized stream event.

    ``payload`` is a string for ``token`` and ``thought`` packets and a
    dict for every other type.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    type: StreamEventType
    payload: str | dict[str, Any]
    timestamp: int = Field(default_factory=_now_ms)

    @classmethod
    def create(cls, event_type: StreamEventType, payload: str | dict[str, Any]) -> StreamPacket:
        return cls(type=event_type, payload=payload)

    def to_sse(self) -> str:
        """Render as one Server-Sent Events frame."""
        data = json.dumps(self.model_dump(mode="json"))
        return f"event: {self.type.value}\ndata: {data}\n\n"
