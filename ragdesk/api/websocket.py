"""WebSocket endpoint pushing live document processing progress.

    client                          server
    ws = new WebSocket(url)  --->   accept, register listener
                             <---   current snapshot
                             <---   snapshot after every update
    ws.close()               --->   unregister listener

Each message is the JSON form of the document's ``DocumentMetadata``.
"""

from __future__ import annotations

import contextlib
from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from ragdesk.pipeline.progress_tracker import ProgressTracker
from ragdesk.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


async def websocket_document_progress(websocket: WebSocket, document_id: str) -> None:
    """Stream progress snapshots of one document to the client."""
    progress_tracker: ProgressTracker = websocket.app.state.progress_tracker
    ingestion_service = websocket.app.state.ingestion_service

    await websocket.accept()
    _logger.info("websocket_connected", document_id=document_id)

    async def _on_progress(doc_id: str, snapshot: dict[str, Any]) -> None:
        # the socket may close between the update and the send;
        # cleanup happens in the finally block below
        with contextlib.suppress(Exception):
            await websocket.send_json(snapshot)

    progress_tracker.register_listener(document_id, _on_progress)

    try:
        snapshot = progress_tracker.get_status(document_id)
        if snapshot is None:
            metadata = ingestion_service.get_document(document_id)
            snapshot = (
                metadata.model_dump(mode="json")
                if metadata is not None
                else {"document_id": document_id, "error": "Document not found"}
            )
        await websocket.send_json(snapshot)

        while True:
            await websocket.receive_text()

    except WebSocketDisconnect:
        _logger.info("websocket_disconnected", document_id=document_id)

    finally:
        progress_tracker.unregister_listener(document_id, _on_progress)
        _logger.debug("websocket_listener_cleaned_up", document_id=document_id)
