"""Retrieval-augmented system prompt assembly.

Before each chat turn the user's message is embedded and matched against
the vector store.  Matches scoring above the similarity threshold are
rendered as numbered sources and appended to the base system prompt::

    [Source 1 - handbook.pdf]
    <chunk text>

    ---

    [Source 2 - notes.md]
    <chunk text>

Retrieval is attempted whenever the caller scopes the turn to specific
documents or the store holds any entries.  An embedding failure degrades
to the base prompt instead of failing the turn.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from ragdesk.utils.errors import RagDeskError

if TYPE_CHECKING:
    from ragdesk.interfaces.embedding_provider import IEmbeddingProvider
    from ragdesk.interfaces.vector_store_provider import IVectorStoreProvider
    from ragdesk.models.rag import SearchResult

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful AI assistant running locally. Be concise and accurate."

SOURCE_SEPARATOR = "\n\n---\n\n"

_CONTEXT_TEMPLATE = (
    "\n\nYou have access to the following document context. "
    "Use it to answer the user's question accurately. "
    "If the context doesn't contain relevant information, say so."
    "\n\n<context>\n{context}\n</context>"
)


class RetrievalPromptBuilder:
    """Builds the system prompt for a chat turn, with document context when relevant.

    Parameters
    ----------
    embedding_provider:
        Embeds the user's query.
    vector_store:
        Searched for matching chunks.
    base_prompt:
        The system prompt used on its own when nothing relevant is found.
    top_k:
        Maximum number of chunks requested from the store.
    min_similarity:
        Chunks must score strictly above this value to be included.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        base_prompt: str = DEFAULT_SYSTEM_PROMPT,
        top_k: int = 5,
        min_similarity: float = 0.3,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._base_prompt = base_prompt
        self._top_k = top_k
        self._min_similarity = min_similarity

    @property
    def base_prompt(self) -> str:
        return self._base_prompt

    async def retrieve(
        self,
        query: str,
        document_ids: list[str] | None = None,
    ) -> list[SearchResult]:
        """Return the chunks relevant to *query*, best first.

        Returns an empty list when retrieval is skipped or fails.
        """
        if not document_ids and self._vector_store.get_count() == 0:
            return []

        try:
            query_embedding = await self._embedding_provider.embed(query)
        except RagDeskError as exc:
            logger.warning("retrieval_embedding_failed", error=str(exc))
            return []

        results = await self._vector_store.search(
            query_embedding,
            top_k=self._top_k,
            document_ids=document_ids or None,
        )
        relevant = [r for r in results if r.score > self._min_similarity]
        logger.info(
            "retrieval_complete",
            candidates=len(results),
            relevant=len(relevant),
            scoped=bool(document_ids),
        )
        return relevant

    async def build_system_prompt(
        self,
        query: str,
        document_ids: list[str] | None = None,
    ) -> str:
        results = await self.retrieve(query, document_ids)
        if not results:
            return self._base_prompt
        return self._base_prompt + _CONTEXT_TEMPLATE.format(context=self.format_context(results))

    @staticmethod
    def format_context(results: list[SearchResult]) -> str:
        return SOURCE_SEPARATOR.join(
            f"[Source {rank} - {result.entry.metadata.filename}]\n{result.entry.text}"
            for rank, result in enumerate(results, start=1)
        )
