"""Abstract base class for the document metadata registry."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragdesk.models.rag import DocumentMetadata


# Concrete implementation: MemoryDocumentRegistry (ragdesk/providers/registry/)
class IDocumentRegistry(ABC):
    """Holds the live :class:`DocumentMetadata` record of every upload.

    ``get`` returns the same object the ingestion service mutates, so a
    status query during processing sees current progress.
    """

    @abstractmethod
    def add(self, metadata: DocumentMetadata) -> None:
        """Register a document record."""

    @abstractmethod
    def get(self, document_id: str) -> DocumentMetadata | None:
        """Return the record for *document_id*, or ``None``."""

    @abstractmethod
    def list(self) -> list[DocumentMetadata]:
        """Return all records in registration order."""

    @abstractmethod
    def remove(self, document_id: str) -> bool:
        """Drop a record.  Returns ``True`` if it existed."""
