"""File-to-text extraction for uploaded documents.

Plain-text formats are decoded as strict UTF-8.  PDFs are read page by
page from their embedded text layer with PyMuPDF (``fitz``); pages are
never rendered or OCR'd, so a scanned page without a text layer comes back
empty and is reported in ``empty_pages``.

Each PDF page is read in a worker thread, which keeps the event loop
responsive while large files are processed and gives the caller a
progress update per page.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog
from pydantic import BaseModel, ConfigDict, Field

from ragdesk.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

PAGE_SEPARATOR = "\n\n---\n\n"

NO_TEXT_MESSAGE = "No text could be extracted from the file."

ProgressCallback = Callable[[float], Awaitable[None] | None]


class ExtractedText(BaseModel):
    """Result of extracting one file.

    ``page_offsets[i]`` is the character offset in ``text`` where the
    i-th non-empty page begins; ``page_numbers[i]`` is that page's 1-based
    number.  Plain-text files are a single page starting at offset 0.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    page_count: int = Field(ge=1)
    empty_pages: list[int] = Field(default_factory=list)
    page_offsets: list[int] = Field(default_factory=lambda: [0])
    page_numbers: list[int] = Field(default_factory=lambda: [1])


class TextExtractor:
    """Turns an uploaded file into text, choosing the reader by extension."""

    PDF_EXTENSIONS = frozenset({".pdf"})

    async def extract(
        self,
        file_path: str | Path,
        filename: str,
        on_progress: ProgressCallback | None = None,
    ) -> ExtractedText:
        """Extract the text of *file_path*.

        Parameters
        ----------
        file_path:
            Where the uploaded bytes were saved.
        filename:
            The client-supplied name; only its extension is consulted.
        on_progress:
            Optional sync or async callable receiving extraction progress
            as a percentage (0-100).  Only paged formats report
            intermediate values.

        Raises
        ------
        ExtractionError
            If the file cannot be read or contains no text.
        """
        extension = Path(filename).suffix.lower()
        if extension in self.PDF_EXTENSIONS:
            result = await self._extract_pdf(str(file_path), on_progress)
        else:
            result = await self._extract_plain(Path(file_path))
            await _report(on_progress, 100.0)

        if not result.text.strip():
            raise ExtractionError(message=NO_TEXT_MESSAGE)

        logger.info(
            "text_extracted",
            filename=filename,
            characters=len(result.text),
            page_count=result.page_count,
            empty_pages=len(result.empty_pages),
        )
        return result

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    @staticmethod
    async def _extract_plain(path: Path) -> ExtractedText:
        try:
            raw = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise ExtractionError(message=f"Could not read file: {exc}") from exc
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ExtractionError(message=f"File is not valid UTF-8 text: {exc}") from exc
        return ExtractedText(text=text, page_count=1)

    async def _extract_pdf(
        self,
        file_path: str,
        on_progress: ProgressCallback | None,
    ) -> ExtractedText:
        try:
            doc = await asyncio.to_thread(fitz.open, file_path)
        except Exception as exc:  # noqa: BLE001 -- PyMuPDF raises several unrelated types
            raise ExtractionError(
                message=f"Could not open PDF: {exc}",
                provider_name="pymupdf",
            ) from exc

        pages: list[tuple[int, str]] = []
        empty_pages: list[int] = []
        try:
            page_count = doc.page_count
            await _report(on_progress, 0.0)
            for index in range(page_count):
                try:
                    page_text = await asyncio.to_thread(self._page_text, doc, index)
                except Exception as exc:  # noqa: BLE001
                    raise ExtractionError(
                        message=f"Could not read PDF page {index + 1}: {exc}",
                        provider_name="pymupdf",
                    ) from exc

                if page_text.strip():
                    pages.append((index + 1, page_text.strip()))
                else:
                    empty_pages.append(index + 1)
                    logger.warning("pdf_page_empty", file_path=file_path, page=index + 1)

                await _report(on_progress, (index + 1) / page_count * 100)
        finally:
            doc.close()

        offsets: list[int] = []
        cursor = 0
        for _, page_text in pages:
            offsets.append(cursor)
            cursor += len(page_text) + len(PAGE_SEPARATOR)

        return ExtractedText(
            text=PAGE_SEPARATOR.join(page_text for _, page_text in pages),
            page_count=max(page_count, 1),
            empty_pages=empty_pages,
            page_offsets=offsets or [0],
            page_numbers=[number for number, _ in pages] or [1],
        )

    @staticmethod
    def _page_text(doc: fitz.Document, index: int) -> str:
        return doc.load_page(index).get_text("text")


async def _report(callback: ProgressCallback | None, percent: float) -> None:
    if callback is None:
        return
    result = callback(percent)
    if asyncio.iscoroutine(result):
        await result
