"""Document ingestion: text extraction, chunking and embedding into the vector store."""

from ragdesk.services.ingestion.chunker import TextChunker
from ragdesk.services.ingestion.ingestion_service import IngestionService
from ragdesk.services.ingestion.text_extractor import ExtractedText, TextExtractor

__all__ = ["ExtractedText", "IngestionService", "TextChunker", "TextExtractor"]
