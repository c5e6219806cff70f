"""Character-window text chunking with natural-boundary snapping.

Splits extracted document text into overlapping windows sized for the
embedding model.  Windows start at fixed strides of
``chunk_size - overlap`` characters.  Each window's end is pulled back to
the last natural boundary found in its final 100 characters -- a paragraph
break first, then sentence ends, then a line break, then a comma -- so
chunks rarely end mid-sentence.  A boundary that would end the window
before the next one starts is ignored, so every character lands in at
least one chunk.

The chunker is pure and deterministic: the same text and parameters always
produce the same chunks.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(logger_name=__name__)

# Highest priority first.
_BOUNDARIES: tuple[str, ...] = ("\n\n", ".\n", ". ", "! ", "? ", "\n", ", ")

# How far back from the raw window end a boundary may be searched for.
_BOUNDARY_LOOKBACK = 100

# A boundary this close to the start of the lookback region is ignored so
# a window is never shortened to a sliver.
_MIN_BOUNDARY_OFFSET = 20


class TextChunker:
    """Splits text into overlapping character windows.

    Parameters
    ----------
    chunk_size:
        Maximum characters per chunk (default 500).
    overlap:
        Characters shared between consecutive window starts (default 100).
        Must be smaller than *chunk_size*.
    """

    def __init__(self, chunk_size: int = 500, overlap: int = 100) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError("overlap must be >= 0 and smaller than chunk_size")
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, text: str) -> list[str]:
        """Split *text* into trimmed, non-empty chunks in document order."""
        return [chunk_text for _, chunk_text in self.chunk_with_offsets(text)]

    def chunk_with_offsets(self, text: str) -> list[tuple[int, str]]:
        """Like :meth:`chunk` but also returns each window's start offset.

        The ingestion service maps offsets back to page numbers.
        """
        if not text:
            return []

        length = len(text)
        if length <= self._chunk_size:
            stripped = text.strip()
            return [(0, stripped)] if stripped else []

        step = self._chunk_size - self._overlap
        chunks: list[tuple[int, str]] = []

        for start in range(0, length, step):
            end = min(start + self._chunk_size, length)
            if end < length:
                snapped = self._snap_to_boundary(text, start, end)
                # never end before the next window starts, or text between them is lost
                if snapped >= start + step:
                    end = snapped

            chunk_text = text[start:end].strip()
            if chunk_text:
                chunks.append((start, chunk_text))

            if end >= length:
                break

        logger.debug(
            "text_chunked",
            text_length=length,
            chunk_count=len(chunks),
            chunk_size=self._chunk_size,
            overlap=self._overlap,
        )
        return chunks

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _snap_to_boundary(text: str, start: int, end: int) -> int:
        """Move *end* back to just after the best boundary in the lookback region."""
        search_from = max(start, end - _BOUNDARY_LOOKBACK)
        region = text[search_from:end]
        for boundary in _BOUNDARIES:
            idx = region.rfind(boundary)
            if idx != -1 and idx > _MIN_BOUNDARY_OFFSET:
                return search_from + idx + len(boundary)
        return end
