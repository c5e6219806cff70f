"""Abstract base class for text-embedding service providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OllamaEmbeddingProvider (ragdesk/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for the embedding model used by ingestion and retrieval.

    Implementations must validate the model's response and raise
    :class:`~ragdesk.utils.errors.EmbeddingError` instead of returning an
    empty or malformed vector.
    """

    @abstractmethod
    async def embed(self, text: str, model: str | None = None) -> list[float]:
        """Embed a single text.

        Parameters
        ----------
        text:
            The text to embed (a chunk at ingestion time, the user's
            message at query time).
        model:
            Override for the configured embedding model.

        Returns
        -------
        list[float]
            A non-empty embedding vector.

        Raises
        ------
        ragdesk.utils.errors.EmbeddingError
            If the call fails or the response fails shape validation.
        """

    @abstractmethod
    def get_model_name(self) -> str:
        """Return the default embedding model, e.g. ``"nomic-embed-text"``."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"ollama"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured."""
