"""Document registry adapters."""

from ragdesk.providers.registry.memory_document_registry import MemoryDocumentRegistry

__all__ = ["MemoryDocumentRegistry"]
