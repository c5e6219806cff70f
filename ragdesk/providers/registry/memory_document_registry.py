"""In-process document registry.

Records live for the lifetime of the server process only; after a restart
the vector store still holds the chunks but the registry starts empty.
"""

from __future__ import annotations

from ragdesk.interfaces.document_registry import IDocumentRegistry
from ragdesk.models.rag import DocumentMetadata


class MemoryDocumentRegistry(IDocumentRegistry):
    def __init__(self) -> None:
        self._documents: dict[str, DocumentMetadata] = {}

    def add(self, metadata: DocumentMetadata) -> None:
        self._documents[metadata.document_id] = metadata

    def get(self, document_id: str) -> DocumentMetadata | None:
        return self._documents.get(document_id)

    def list(self) -> list[DocumentMetadata]:
        return list(self._documents.values())

    def remove(self, document_id: str) -> bool:
        return self._documents.pop(document_id, None) is not None
