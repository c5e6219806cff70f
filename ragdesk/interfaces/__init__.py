"""Abstract provider contracts.

Services depend on these ABCs, never on concrete adapters, so the Ollama,
JSON-file and SQLite implementations can be swapped (and faked in tests).
"""

from ragdesk.interfaces.agent_plugin import IAgentPlugin
from ragdesk.interfaces.conversation_store import IConversationStore
from ragdesk.interfaces.document_registry import IDocumentRegistry
from ragdesk.interfaces.embedding_provider import IEmbeddingProvider
from ragdesk.interfaces.llm_provider import IChatProvider
from ragdesk.interfaces.vector_store_provider import IVectorStoreProvider
from ragdesk.interfaces.web_search_provider import IWebSearchProvider, WebSearchResult

__all__ = [
    "IAgentPlugin",
    "IChatProvider",
    "IConversationStore",
    "IDocumentRegistry",
    "IEmbeddingProvider",
    "IVectorStoreProvider",
    "IWebSearchProvider",
    "WebSearchResult",
]
