"""Abstract base class for vector-store providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragdesk.models.rag import SearchResult, VectorEntry, VectorStoreStats


# Concrete implementation: JsonVectorStore (ragdesk/providers/vector_store/)
class IVectorStoreProvider(ABC):
    """Contract for the embedded-chunk collection.

    The collection is append-only except for whole-document removal.
    Every mutation is durable once the awaited call returns.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Load persisted state.  Unreadable state yields an empty store."""

    @abstractmethod
    async def add_entries(self, entries: list[VectorEntry]) -> int:
        """Append entries and persist them.  Returns the number added."""

    @abstractmethod
    async def search(
        self,
        query_embedding: list[float],
        top_k: int = 5,
        document_ids: list[str] | None = None,
    ) -> list[SearchResult]:
        """Rank entries by cosine similarity to *query_embedding*.

        Parameters
        ----------
        query_embedding:
            The embedded query.
        top_k:
            Maximum number of results.
        document_ids:
            When non-empty, only entries of these documents are considered.

        Returns
        -------
        list[SearchResult]
            Highest score first; equal scores keep insertion order.
        """

    @abstractmethod
    async def remove_by_document_id(self, document_id: str) -> int:
        """Delete every entry of a document.  Returns the number removed."""

    @abstractmethod
    def list_documents(self) -> list[str]:
        """Return the distinct document ids present in the store."""

    @abstractmethod
    def get_count(self) -> int:
        """Return the total number of entries."""

    @abstractmethod
    def get_stats(self) -> VectorStoreStats:
        """Return entry and document totals."""
