"""FastAPI routes for ragdesk.

Service dependencies are resolved from ``app.state`` via ``Depends`` using
the ``Annotated`` pattern; ``main.py`` populates the state at startup.

    Endpoint                         Method  Description
    /api/health                      GET     Health check + Ollama reachability
    /api/models                      GET     Models installed in Ollama
    /api/chat/init                   POST    Create a conversation
    /api/chat                        GET     List conversations
    /api/chat/{conversation_id}      GET     Conversation with messages
    /api/chat/stream                 POST    Run a chat turn (Server-Sent Events)
    /api/chat/stop                   POST    Abort the active turn
    /api/documents/upload            POST    Upload a document for ingestion
    /api/documents                   GET     List documents
    /api/documents/stats             GET     Vector store totals
    /api/documents/{document_id}     GET     Document status
    /api/documents/{document_id}     DELETE  Remove a document and its vectors
"""

from __future__ import annotations

from typing import Annotated, AsyncIterator

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response, UploadFile
from fastapi.responses import StreamingResponse

from ragdesk import __version__
from ragdesk.api.schemas import (
    ChatStreamRequest,
    ConversationListResponse,
    DocumentListResponse,
    DocumentStatsResponse,
    ErrorResponse,
    HealthResponse,
    InitChatRequest,
    InitChatResponse,
    ModelsResponse,
    RemoveDocumentResponse,
    StopChatRequest,
    StopChatResponse,
)
from ragdesk.config.settings import Settings
from ragdesk.interfaces.llm_provider import IChatProvider
from ragdesk.interfaces.vector_store_provider import IVectorStoreProvider
from ragdesk.models.chat import ConversationDetail
from ragdesk.models.rag import DocumentMetadata, DocumentStatus
from ragdesk.models.stream import StreamEventType, StreamPacket
from ragdesk.services.chat_service import ChatService
from ragdesk.services.ingestion.ingestion_service import IngestionService
from ragdesk.utils.errors import NotFoundError, RagDeskError
from ragdesk.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

_UPLOAD_CHUNK_SIZE = 64 * 1024


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def _get_ingestion_service(request: Request) -> IngestionService:
    return request.app.state.ingestion_service


def _get_vector_store(request: Request) -> IVectorStoreProvider:
    return request.app.state.vector_store


def _get_chat_provider(request: Request) -> IChatProvider:
    return request.app.state.chat_provider


SettingsDep = Annotated[Settings, Depends(_get_settings)]
ChatServiceDep = Annotated[ChatService, Depends(_get_chat_service)]
IngestionDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
VectorStoreDep = Annotated[IVectorStoreProvider, Depends(_get_vector_store)]
ChatProviderDep = Annotated[IChatProvider, Depends(_get_chat_provider)]


# ---------------------------------------------------------------------------
# Health / models
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(chat_provider: ChatProviderDep, vector_store: VectorStoreDep) -> HealthResponse:
    ollama_ok = await chat_provider.validate_connection()
    return HealthResponse(
        status="healthy" if ollama_ok else "degraded",
        version=__version__,
        providers={
            chat_provider.get_provider_name(): ollama_ok,
            "vectors": vector_store.get_count(),
        },
    )


@router.get(
    "/models",
    response_model=ModelsResponse,
    responses={503: {"model": ErrorResponse}},
    summary="List installed models",
)
async def list_models(chat_provider: ChatProviderDep) -> ModelsResponse:
    return ModelsResponse(models=await chat_provider.list_models())


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


@router.post("/chat/init", response_model=InitChatResponse, status_code=201)
async def init_chat(chat_service: ChatServiceDep, body: InitChatRequest | None = None) -> InitChatResponse:
    conversation = await chat_service.create_conversation(body.title if body else None)
    return InitChatResponse(conversation_id=conversation.id)


@router.get("/chat", response_model=ConversationListResponse)
async def list_conversations(chat_service: ChatServiceDep) -> ConversationListResponse:
    return ConversationListResponse(conversations=await chat_service.list_conversations())


@router.post(
    "/chat/stream",
    responses={404: {"model": ErrorResponse}},
    summary="Run a chat turn and stream packets as Server-Sent Events",
)
async def stream_chat(body: ChatStreamRequest, chat_service: ChatServiceDep) -> StreamingResponse:
    try:
        await chat_service.get_conversation(body.conversation_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc

    async def _event_stream() -> AsyncIterator[str]:
        try:
            async for packet in chat_service.stream_chat(
                body.conversation_id,
                body.message,
                model=body.model,
                document_ids=body.document_ids,
                options=body.options,
            ):
                yield packet.to_sse()
        except RagDeskError as exc:
            _logger.error("chat_stream_error", conversation_id=body.conversation_id, error=str(exc))
            yield StreamPacket.create(StreamEventType.ERROR, {"message": str(exc)}).to_sse()

    return StreamingResponse(
        _event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post("/chat/stop", response_model=StopChatResponse)
async def stop_chat(body: StopChatRequest, chat_service: ChatServiceDep) -> StopChatResponse:
    return StopChatResponse(stopped=chat_service.stop(body.conversation_id))


@router.get(
    "/chat/{conversation_id}",
    response_model=ConversationDetail,
    responses={404: {"model": ErrorResponse}},
)
async def get_conversation(conversation_id: str, chat_service: ChatServiceDep) -> ConversationDetail:
    try:
        return await chat_service.get_conversation(conversation_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post(
    "/documents/upload",
    response_model=DocumentMetadata,
    status_code=202,
    responses={413: {"model": ErrorResponse}},
    summary="Upload a document for ingestion",
)
async def upload_document(
    file: UploadFile,
    response: Response,
    background_tasks: BackgroundTasks,
    ingestion: IngestionDep,
    settings: SettingsDep,
    wait: Annotated[bool, Query(description="Process before responding")] = False,
) -> DocumentMetadata:
    """Accept a file and ingest it.

    By default processing continues in the background and the response is
    the freshly registered ``processing`` record (poll the document or
    subscribe to its WebSocket).  With ``wait=true`` the response carries
    the final record: 200 when ready, 202 otherwise.
    """
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await file.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > settings.max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum: {settings.max_upload_bytes} bytes.",
            )
        chunks.append(chunk)
    data = b"".join(chunks)
    del chunks

    metadata = ingestion.register_upload(file.filename or "upload.txt")
    path = await ingestion.save_upload(metadata, data)

    if wait:
        await ingestion.process_registered(metadata, path)
        if metadata.status is DocumentStatus.READY:
            response.status_code = 200
    else:
        background_tasks.add_task(ingestion.process_registered, metadata, path)

    return metadata


@router.get("/documents", response_model=DocumentListResponse)
async def list_documents(ingestion: IngestionDep) -> DocumentListResponse:
    return DocumentListResponse(documents=ingestion.list_documents())


@router.get("/documents/stats", response_model=DocumentStatsResponse)
async def document_stats(vector_store: VectorStoreDep) -> DocumentStatsResponse:
    stats = vector_store.get_stats()
    return DocumentStatsResponse(total_vectors=stats.total_vectors, documents=stats.documents)


@router.get(
    "/documents/{document_id}",
    response_model=DocumentMetadata,
    responses={404: {"model": ErrorResponse}},
)
async def get_document(document_id: str, ingestion: IngestionDep) -> DocumentMetadata:
    metadata = ingestion.get_document(document_id)
    if metadata is None:
        raise HTTPException(status_code=404, detail=f"Document {document_id} not found")
    return metadata


@router.delete("/documents/{document_id}", response_model=RemoveDocumentResponse)
async def remove_document(document_id: str, ingestion: IngestionDep) -> RemoveDocumentResponse:
    return RemoveDocumentResponse(removed=await ingestion.remove_document(document_id))
