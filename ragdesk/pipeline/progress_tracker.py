"""Document progress tracking with callback-based listener notification.

Stores the latest snapshot of every document's processing record and
broadcasts each update to listener callbacks registered for that document.

    IngestionService --update()--> ProgressTracker --callback()--> WebSocket handler

Listeners are keyed by document id, so two uploads never see each other's
updates.  A listener that raises is logged and skipped.  Both sync and
async callbacks are supported.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import structlog

from ragdesk.models.rag import DocumentMetadata
from ragdesk.utils.logging import get_logger


class ProgressTracker:
    """Tracks and broadcasts document processing progress via callbacks."""

    def __init__(self) -> None:
        self._snapshots: dict[str, dict[str, Any]] = {}
        self._listeners: dict[str, list[Callable]] = {}
        self._logger: structlog.BoundLogger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def update(self, metadata: DocumentMetadata) -> None:
        """Record the current state of *metadata* and notify listeners."""
        snapshot = metadata.model_dump(mode="json")
        self._snapshots[metadata.document_id] = snapshot

        self._logger.debug(
            "progress_update",
            document_id=metadata.document_id,
            status=metadata.status.value,
            progress=metadata.progress,
        )

        await self._notify_listeners(metadata.document_id, snapshot)

    def register_listener(self, document_id: str, callback: Callable) -> None:
        """Register a callback receiving ``(document_id, snapshot)`` updates."""
        listeners = self._listeners.setdefault(document_id, [])
        if callback not in listeners:
            listeners.append(callback)
            self._logger.debug(
                "listener_registered",
                document_id=document_id,
                total_listeners=len(listeners),
            )

    def unregister_listener(self, document_id: str, callback: Callable) -> None:
        listeners = self._listeners.get(document_id, [])
        if callback in listeners:
            listeners.remove(callback)
            if not listeners:
                self._listeners.pop(document_id, None)
            self._logger.debug(
                "listener_unregistered",
                document_id=document_id,
                remaining_listeners=len(listeners),
            )

    def get_status(self, document_id: str) -> dict[str, Any] | None:
        """Return the last snapshot for a document, or ``None`` if untracked."""
        return self._snapshots.get(document_id)

    def forget(self, document_id: str) -> None:
        """Drop the stored snapshot of a removed document."""
        self._snapshots.pop(document_id, None)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _notify_listeners(self, document_id: str, snapshot: dict[str, Any]) -> None:
        for callback in list(self._listeners.get(document_id, [])):
            try:
                result = callback(document_id, snapshot)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                self._logger.warning(
                    "listener_callback_error",
                    document_id=document_id,
                    error=str(exc),
                    callback=getattr(callback, "__name__", repr(callback)),
                )
