"""ragdesk FastAPI application entry point.

Wires together all providers, services, and routes via dependency
injection.  Loads configuration from ``.env`` and ``config/config.yaml``
and configures structured logging at import time.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI, WebSocket

from ragdesk import __version__
from ragdesk.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware, configure_cors
from ragdesk.api.routes import router as api_router
from ragdesk.api.websocket import websocket_document_progress
from ragdesk.config import Settings, load_config, settings
from ragdesk.pipeline.progress_tracker import ProgressTracker
from ragdesk.pipeline.stream_normalizer import StreamNormalizer
from ragdesk.plugins.local_file_reader import LocalFileReaderPlugin
from ragdesk.plugins.registry import PluginRegistry
from ragdesk.plugins.web_search import WebSearchPlugin
from ragdesk.providers.conversation.sqlite_conversation_store import SQLiteConversationStore
from ragdesk.providers.embedding.ollama_embedding_provider import OllamaEmbeddingProvider
from ragdesk.providers.llm.ollama_provider import OllamaChatProvider
from ragdesk.providers.registry.memory_document_registry import MemoryDocumentRegistry
from ragdesk.providers.search.duckduckgo_provider import DuckDuckGoSearchProvider
from ragdesk.providers.vector_store.json_vector_store import JsonVectorStore
from ragdesk.services.chat_service import ChatService
from ragdesk.services.ingestion.chunker import TextChunker
from ragdesk.services.ingestion.ingestion_service import IngestionService
from ragdesk.services.ingestion.text_extractor import TextExtractor
from ragdesk.services.prompt_builder import DEFAULT_SYSTEM_PROMPT, RetrievalPromptBuilder
from ragdesk.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component assembly
# ---------------------------------------------------------------------------


def _build_plugin_registry(app_settings: Settings) -> PluginRegistry:
    registry = PluginRegistry()
    registry.register(LocalFileReaderPlugin(root_dir=app_settings.plugin_root_dir))
    registry.register(WebSearchPlugin(DuckDuckGoSearchProvider()))
    return registry


def _build_all(app_settings: Settings, app_config: dict[str, Any] | None = None) -> dict[str, Any]:
    """Instantiate every provider and service.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    app_config = app_config or {}
    system_prompt = app_config.get("chat", {}).get("system_prompt") or DEFAULT_SYSTEM_PROMPT

    chat_provider = OllamaChatProvider(app_settings)
    embedding_provider = OllamaEmbeddingProvider(app_settings)
    vector_store = JsonVectorStore(app_settings.vector_store_path)
    conversation_store = SQLiteConversationStore(app_settings.conversation_db_path)
    progress_tracker = ProgressTracker()

    ingestion_service = IngestionService(
        extractor=TextExtractor(),
        chunker=TextChunker(chunk_size=app_settings.chunk_size, overlap=app_settings.chunk_overlap),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        registry=MemoryDocumentRegistry(),
        progress_tracker=progress_tracker,
        embedding_concurrency=app_settings.embedding_concurrency,
        upload_dir=app_settings.upload_dir,
    )

    prompt_builder = RetrievalPromptBuilder(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        base_prompt=system_prompt,
        top_k=app_settings.rag_top_k,
        min_similarity=app_settings.rag_min_similarity,
    )

    chat_service = ChatService(
        chat_provider=chat_provider,
        conversation_store=conversation_store,
        prompt_builder=prompt_builder,
        normalizer=StreamNormalizer(),
        default_model=app_settings.chat_model,
        history_limit=app_settings.history_limit,
        plugin_registry=_build_plugin_registry(app_settings),
        tools_enabled=app_settings.tools_enabled,
    )

    return {
        "settings": app_settings,
        "chat_provider": chat_provider,
        "embedding_provider": embedding_provider,
        "vector_store": vector_store,
        "conversation_store": conversation_store,
        "progress_tracker": progress_tracker,
        "ingestion_service": ingestion_service,
        "chat_service": chat_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["vector_store"].initialize()
    await components["conversation_store"].initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        chat_model=settings.chat_model,
        embedding_model=settings.embedding_model,
        vectors=components["vector_store"].get_count(),
        tools_enabled=settings.tools_enabled,
    )

    yield

    await components["chat_provider"].aclose()
    await components["embedding_provider"].aclose()
    _logger.info("app_shutdown", message="Ollama clients closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="ragdesk API",
        version=__version__,
        description=(
            "Chat with a local Ollama model, optionally grounded in documents "
            "you upload. Replies stream as Server-Sent Events."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=config.get("cors", {}).get("allowed_origins"))

    application.include_router(api_router)

    @application.websocket("/ws/documents/{document_id}")
    async def ws_document_progress(websocket: WebSocket, document_id: str) -> None:
        await websocket_document_progress(websocket, document_id)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def run() -> None:
    uvicorn.run(
        "ragdesk.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )


if __name__ == "__main__":
    run()
