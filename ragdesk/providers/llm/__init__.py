"""Chat model adapters.

    - OllamaChatProvider -- streams Ollama's native ``/api/chat`` NDJSON

main.py creates the provider and injects it into FastAPI's app.state.
"""

from ragdesk.providers.llm.ollama_provider import OllamaChatProvider

__all__ = ["OllamaChatProvider"]
