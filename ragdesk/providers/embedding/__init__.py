"""Embedding provider adapters.

    - OllamaEmbeddingProvider -- nomic-embed-text (or any Ollama embedding
      model) through the OpenAI-compatible ``/v1`` endpoint
"""

from ragdesk.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider

__all__ = ["OllamaEmbeddingProvider"]
