"""JSON-file vector store provider.

Keeps every :class:`VectorEntry` in memory and mirrors the whole collection
to a single JSON array on disk after each mutation.  Search is a brute-force
cosine scan with numpy, which is fine for the few thousand chunks a
personal document set produces.

The snapshot is written to a temporary file and moved into place with
``os.replace`` so a crash mid-write leaves the previous snapshot intact.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

import numpy as np
import structlog
from pydantic import TypeAdapter, ValidationError

from ragdesk.interfaces.vector_store_provider import IVectorStoreProvider
from ragdesk.models.rag import SearchResult, VectorEntry, VectorStoreStats

logger = structlog.get_logger(logger_name=__name__)

_ENTRY_LIST = TypeAdapter(list[VectorEntry])


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 for mismatched dimensions or a zero-magnitude vector.
    """
    if len(a) != len(b) or not a:
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    denominator = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denominator == 0.0:
        return 0.0
    return float(np.dot(va, vb) / denominator)


class JsonVectorStore(IVectorStoreProvider):
    """Vector store persisted as one JSON file.

    Parameters
    ----------
    store_path:
        Location of the snapshot, e.g. ``data/vectors/store.json``.
        Parent directories are created on :meth:`initialize`.
    """

    def __init__(self, store_path: str = "data/vectors/store.json") -> None:
        self._path = Path(store_path)
        self._entries: list[VectorEntry] = []
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            logger.info("vector_store_empty", path=str(self._path))
            return

        try:
            raw = await asyncio.to_thread(self._path.read_text, "utf-8")
            self._entries = _ENTRY_LIST.validate_python(json.loads(raw))
        except (OSError, ValueError, ValidationError) as exc:
            # ValueError covers json.JSONDecodeError and UnicodeDecodeError
            logger.warning(
                "vector_store_load_failed",
                path=str(self._path),
                error=str(exc),
            )
            self._entries = []
            return

        logger.info(
            "vector_store_loaded",
            path=str(self._path),
            entries=len(self._entries),
        )

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def add_entries(self, entries: list[VectorEntry]) -> int:
        if not entries:
            return 0
        async with self._lock:
            self._entries.extend(entries)
            await self._persist()
        logger.info("vector_store_entries_added", added=len(entries), total=len(self._entries))
        return len(entries)

    async def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        document_ids: list[str] | None = None,
    ) -> list[SearchResult]:
        if document_ids:
            wanted = set(document_ids)
            pool = [e for e in self._entries if e.document_id in wanted]
        else:
            pool = list(self._entries)

        scored = [
            SearchResult(entry=entry, score=cosine_similarity(query_embedding, entry.embedding))
            for entry in pool
        ]
        # sorted() is stable with reverse=True, so ties keep insertion order
        scored = sorted(scored, key=lambda r: r.score, reverse=True)
        return scored[: max(top_k, 0)]

    async def remove_by_document_id(self, document_id: str) -> int:
        async with self._lock:
            before = len(self._entries)
            self._entries = [e for e in self._entries if e.document_id != document_id]
            removed = before - len(self._entries)
            if removed:
                await self._persist()
        logger.info("vector_store_document_removed", document_id=document_id, removed=removed)
        return removed

    def list_documents(self) -> list[str]:
        return list(dict.fromkeys(e.document_id for e in self._entries))

    def get_count(self) -> int:
        return len(self._entries)

    def get_stats(self) -> VectorStoreStats:
        return VectorStoreStats(
            total_vectors=len(self._entries),
            documents=len(self.list_documents()),
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def _persist(self) -> None:
        payload = _ENTRY_LIST.dump_json(self._entries)
        await asyncio.to_thread(self._write_atomic, payload)

    def _write_atomic(self, payload: bytes) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp_path, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self._path)
