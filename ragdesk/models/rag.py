"""Retrieval data models: embedded chunks, search hits, and document records.

``VectorEntry`` is the unit persisted by the vector store -- one chunk of an
uploaded document plus its embedding.  Entries are immutable; a document's
entries are only ever removed together.

``DocumentMetadata`` is the one mutable model here.  The ingestion service
updates it in place as a file moves through extraction, embedding and
storage, and status queries read the same object.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class VectorEntryMetadata(BaseModel):
    """Provenance of one chunk inside its source document."""

    model_config = ConfigDict(frozen=True)

    filename: str
    chunk_index: int = Field(ge=0)
    page_number: int | None = Field(default=None, ge=1)


class VectorEntry(BaseModel):
    """One embedded chunk of a document."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    document_id: str
    text: str = Field(min_length=1)
    embedding: list[float]
    metadata: VectorEntryMetadata


class SearchResult(BaseModel):
    """A vector entry paired with its cosine similarity to the query."""

    model_config = ConfigDict(frozen=True)

    entry: VectorEntry
    score: float


class VectorStoreStats(BaseModel):
    """Totals reported by the documents stats endpoint."""

    model_config = ConfigDict(frozen=True)

    total_vectors: int = Field(ge=0)
    documents: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Document lifecycle
# ---------------------------------------------------------------------------
class DocumentStatus(str, Enum):
    """Processing states of an uploaded document.

    processing -> extracting -> embedding -> ready, or -> failed from any state.
    """

    PROCESSING = "processing"
    EXTRACTING = "extracting"
    EMBEDDING = "embedding"
    READY = "ready"
    FAILED = "failed"


class DocumentMetadata(BaseModel):
    """Processing record for one uploaded file.

    ``progress`` never decreases; it reaches 100 only on ``ready`` and keeps
    its last value on ``failed``.  ``error`` is set only when failed.
    """

    model_config = ConfigDict(validate_assignment=True)

    document_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    filename: str
    status: DocumentStatus = DocumentStatus.PROCESSING
    progress: int = Field(default=0, ge=0, le=100)
    chunk_count: int = Field(default=0, ge=0)
    page_count: int = Field(default=1, ge=1)
    empty_pages: list[int] = Field(default_factory=list)
    error: str | None = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(tz=timezone.utc)  # noqa: UP017
    )

    def advance(self, progress: int, status: DocumentStatus | None = None) -> None:
        """Move progress forward (never back) and optionally change status."""
        if status is not None:
            self.status = status
        self.progress = max(self.progress, min(progress, 100))

    def mark_failed(self, error: str) -> None:
        self.status = DocumentStatus.FAILED
        self.error = error
