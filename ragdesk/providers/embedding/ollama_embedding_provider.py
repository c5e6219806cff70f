"""Ollama embedding provider adapter (local/free).

Wraps the Ollama OpenAI-compatible endpoint to implement
:class:`IEmbeddingProvider`.  Every response is shape-checked before it
is returned: a model that is missing, still loading, or not an embedding
model tends to answer with an empty ``data`` list or an empty vector, and
storing such a vector would silently break similarity search later.
"""

from __future__ import annotations

import numbers

import httpx
import openai
import structlog

from ragdesk.config.settings import Settings
from ragdesk.interfaces.embedding_provider import IEmbeddingProvider
from ragdesk.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)


class OllamaEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by a model served via Ollama.

    Defaults to ``nomic-embed-text`` (768 dimensions).  The observed
    dimension is logged once per instance; it is informational only.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            api_key="ollama",  # Ollama doesn't require a real key
            timeout=settings.embedding_timeout_seconds,
            max_retries=1,
        )
        self._model = settings.embedding_model
        self._dimension: int | None = None

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, text: str, model: str | None = None) -> list[float]:
        """Embed one text and validate the returned vector."""
        model_name = model or self._model
        try:
            response = await self._client.embeddings.create(input=[text], model=model_name)
        except openai.APIError as exc:
            raise EmbeddingError(
                message=f"Embedding model \"{model_name}\" request failed: {exc}",
                provider_name=self.get_provider_name(),
                model=model_name,
            ) from exc

        data = getattr(response, "data", None)
        if not data:
            raise EmbeddingError(
                message=f"Embedding model \"{model_name}\" returned no embeddings",
                provider_name=self.get_provider_name(),
                model=model_name,
            )

        vector = getattr(data[0], "embedding", None)
        if not self._is_valid_vector(vector):
            raise EmbeddingError(
                message=f"Embedding model \"{model_name}\" returned an invalid embedding vector",
                provider_name=self.get_provider_name(),
                model=model_name,
            )

        if self._dimension is None:
            self._dimension = len(vector)
            logger.info("embedding_dimension", model=model_name, dimension=self._dimension)

        return [float(v) for v in vector]

    @staticmethod
    def _is_valid_vector(vector: object) -> bool:
        if not isinstance(vector, list) or not vector:
            return False
        return all(
            isinstance(v, numbers.Real) and not isinstance(v, bool) for v in vector
        )

    def get_dimension(self) -> int | None:
        """Return the dimension seen on the first successful call, if any."""
        return self._dimension

    def get_model_name(self) -> str:
        return self._model

    def get_provider_name(self) -> str:
        return "ollama"

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama server is reachable."""
        if not self._base_url:
            return False
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=3.0)
            return response.status_code == 200
        except (httpx.ConnectError, httpx.TimeoutException):
            return False

    async def aclose(self) -> None:
        await self._client.close()
