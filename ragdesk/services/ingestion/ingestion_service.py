"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **extract -> chunk -> embed -> store**.

Every upload gets a :class:`DocumentMetadata` record that is registered
before any work starts and then mutated in place, so status queries made
while a file is processing see live progress.  Progress milestones::

    0   registered (processing)
    10  extraction started (extracting); PDF pages move it towards 55
    58  extraction finished
    60  text validated, chunking
    70  embedding started (embedding); each chunk moves it towards 95
    100 stored (ready)

A chunk whose embedding fails is logged and skipped.  A document removed
while its chunks are being embedded is never written to the vector store.
Any other failure marks the document ``failed`` with the error message;
:meth:`process_file` returns the record rather than raising.

All collaborators are injected via the constructor.
"""

from __future__ import annotations

import asyncio
from bisect import bisect_right
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from ragdesk.models.rag import DocumentMetadata, DocumentStatus, VectorEntry, VectorEntryMetadata
from ragdesk.services.ingestion.chunker import TextChunker
from ragdesk.services.ingestion.text_extractor import ExtractedText, TextExtractor
from ragdesk.utils.concurrency import throttled_gather

if TYPE_CHECKING:
    from ragdesk.interfaces.document_registry import IDocumentRegistry
    from ragdesk.interfaces.embedding_provider import IEmbeddingProvider
    from ragdesk.interfaces.vector_store_provider import IVectorStoreProvider
    from ragdesk.pipeline.progress_tracker import ProgressTracker

logger = structlog.get_logger(logger_name=__name__)

_EXTRACTION_START = 10
_EXTRACTION_SPAN = 45
_EXTRACTION_DONE = 58
_TEXT_READY = 60
_EMBEDDING_START = 70
_EMBEDDING_SPAN = 25

REMOVED_DURING_PROCESSING = "Document was removed while it was being processed."


class IngestionService:
    """Turns uploaded files into searchable vector entries.

    Parameters
    ----------
    extractor:
        Reads text out of the uploaded file.
    chunker:
        Splits the text into overlapping windows.
    embedding_provider:
        Embeds each chunk.
    vector_store:
        Stores the embedded chunks.
    registry:
        Holds the live metadata record of every document.
    progress_tracker:
        Optional; receives a snapshot after every metadata change.
    embedding_concurrency:
        Maximum embedding calls in flight.  ``1`` embeds chunks one after
        another.
    upload_dir:
        Where :meth:`save_upload` writes uploaded bytes.
    """

    def __init__(
        self,
        extractor: TextExtractor,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        registry: IDocumentRegistry,
        progress_tracker: ProgressTracker | None = None,
        embedding_concurrency: int = 1,
        upload_dir: str | Path = "data/uploads",
    ) -> None:
        self._extractor = extractor
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._registry = registry
        self._progress_tracker = progress_tracker
        self._embedding_concurrency = max(1, embedding_concurrency)
        self._upload_dir = Path(upload_dir)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def register_upload(self, filename: str) -> DocumentMetadata:
        """Create and register a ``processing`` record for a new upload."""
        metadata = DocumentMetadata(filename=filename)
        self._registry.add(metadata)
        logger.info(
            "document_registered",
            document_id=metadata.document_id,
            filename=filename,
        )
        return metadata

    async def save_upload(self, metadata: DocumentMetadata, data: bytes) -> Path:
        """Write uploaded bytes to ``upload_dir`` under the document's id."""
        path = self._upload_path(metadata)
        await asyncio.to_thread(self._write_file, path, data)
        return path

    async def process_file(self, file_path: str | Path, filename: str) -> DocumentMetadata:
        """Register and fully process a file; never raises for pipeline failures."""
        metadata = self.register_upload(filename)
        return await self.process_registered(metadata, file_path)

    async def process_registered(
        self,
        metadata: DocumentMetadata,
        file_path: str | Path,
    ) -> DocumentMetadata:
        """Run extraction, chunking, embedding and storage for *metadata*."""
        log = logger.bind(document_id=metadata.document_id, filename=metadata.filename)
        await self._publish(metadata)

        try:
            metadata.advance(_EXTRACTION_START, DocumentStatus.EXTRACTING)
            await self._publish(metadata)

            async def _on_extraction_progress(percent: float) -> None:
                metadata.advance(_EXTRACTION_START + round(percent / 100 * _EXTRACTION_SPAN))
                await self._publish(metadata)

            extracted = await self._extractor.extract(
                file_path, metadata.filename, on_progress=_on_extraction_progress
            )
            metadata.page_count = extracted.page_count
            metadata.empty_pages = list(extracted.empty_pages)
            metadata.advance(_EXTRACTION_DONE)
            await self._publish(metadata)

            metadata.advance(_TEXT_READY)
            await self._publish(metadata)

            chunks = self._chunker.chunk_with_offsets(extracted.text)
            log.info("document_chunked", chunk_count=len(chunks))

            metadata.advance(_EMBEDDING_START, DocumentStatus.EMBEDDING)
            await self._publish(metadata)

            entries = await self._embed_chunks(metadata, chunks, extracted)

            if self._registry.get(metadata.document_id) is not metadata:
                metadata.mark_failed(REMOVED_DURING_PROCESSING)
                log.warning("document_removed_during_ingestion", chunk_total=len(chunks))
                return metadata

            if entries:
                await self._vector_store.add_entries(entries)
            else:
                log.warning("document_no_chunks_embedded", chunk_total=len(chunks))
            metadata.chunk_count = len(entries)

            metadata.advance(100, DocumentStatus.READY)
            await self._publish(metadata)
            log.info(
                "document_ready",
                chunk_count=metadata.chunk_count,
                chunk_total=len(chunks),
                page_count=metadata.page_count,
            )
        except Exception as exc:
            metadata.mark_failed(str(exc))
            await self._publish(metadata)
            log.error("document_failed", error=str(exc), progress=metadata.progress)

        return metadata

    def list_documents(self) -> list[DocumentMetadata]:
        return self._registry.list()

    def get_document(self, document_id: str) -> DocumentMetadata | None:
        return self._registry.get(document_id)

    async def remove_document(self, document_id: str) -> bool:
        """Delete a document's vectors, saved upload and registry record.

        Returns ``True`` if anything belonging to the document existed.
        """
        metadata = self._registry.get(document_id)
        removed_vectors = await self._vector_store.remove_by_document_id(document_id)
        removed_record = self._registry.remove(document_id)

        if metadata is not None:
            path = self._upload_path(metadata)
            await asyncio.to_thread(path.unlink, True)
        if self._progress_tracker is not None:
            self._progress_tracker.forget(document_id)

        logger.info(
            "document_removed",
            document_id=document_id,
            vectors=removed_vectors,
            had_record=removed_record,
        )
        return removed_record or removed_vectors > 0

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _embed_chunks(
        self,
        metadata: DocumentMetadata,
        chunks: list[tuple[int, str]],
        extracted: ExtractedText,
    ) -> list[VectorEntry]:
        total = len(chunks)
        if total == 0:
            return []

        done = 0

        async def _embed_one(chunk_index: int, offset: int, text: str) -> VectorEntry | None:
            nonlocal done
            try:
                embedding = await self._embedding_provider.embed(text)
                entry = VectorEntry(
                    document_id=metadata.document_id,
                    text=text,
                    embedding=embedding,
                    metadata=VectorEntryMetadata(
                        filename=metadata.filename,
                        chunk_index=chunk_index,
                        page_number=_page_for_offset(extracted, offset),
                    ),
                )
            except Exception as exc:  # noqa: BLE001 -- a failed chunk is skipped
                logger.warning(
                    "chunk_embedding_failed",
                    document_id=metadata.document_id,
                    chunk_index=chunk_index,
                    error=str(exc),
                )
                entry = None

            done += 1
            metadata.advance(_EMBEDDING_START + round(done / total * _EMBEDDING_SPAN))
            await self._publish(metadata)
            return entry

        results = await throttled_gather(
            [_embed_one(i, offset, text) for i, (offset, text) in enumerate(chunks)],
            limit=self._embedding_concurrency,
        )
        # results keep input order, so entries stay in chunk_index order
        return [r for r in results if isinstance(r, VectorEntry)]

    async def _publish(self, metadata: DocumentMetadata) -> None:
        if self._progress_tracker is None:
            return
        # a removed document stops reporting progress
        if self._registry.get(metadata.document_id) is not metadata:
            return
        await self._progress_tracker.update(metadata)

    def _upload_path(self, metadata: DocumentMetadata) -> Path:
        return self._upload_dir / f"{metadata.document_id}{Path(metadata.filename).suffix.lower()}"

    @staticmethod
    def _write_file(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


def _page_for_offset(extracted: ExtractedText, offset: int) -> int | None:
    """Map a character offset in the stitched text to a 1-based page number."""
    if extracted.page_count <= 1:
        return 1
    idx = bisect_right(extracted.page_offsets, offset) - 1
    if idx < 0:
        return None
    return extracted.page_numbers[idx]
