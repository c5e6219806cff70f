"""Chat turn orchestration.

One call to :meth:`ChatService.stream_chat` runs a full turn:

    1. persist the user message
    2. load the most recent history (oldest first)
    3. build the system prompt, with document context when relevant
    4. stream the model's reply through the normalizer
    5. persist the assistant message once the ``done`` packet arrives

Each in-flight turn registers a :class:`CancellationToken` under its
conversation id; :meth:`ChatService.stop` sets it and the provider stops
reading at the next chunk boundary.  Only one stream per conversation is
tracked: a new turn replaces the previous handle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, AsyncIterator

import structlog

from ragdesk.models.chat import ConversationDetail, MessageRole
from ragdesk.models.stream import StreamEventType, StreamPacket
from ragdesk.utils.concurrency import CancellationToken
from ragdesk.utils.errors import NotFoundError, RagDeskError

if TYPE_CHECKING:
    from ragdesk.interfaces.conversation_store import IConversationStore
    from ragdesk.interfaces.llm_provider import IChatProvider
    from ragdesk.models.chat import Conversation
    from ragdesk.pipeline.stream_normalizer import StreamNormalizer
    from ragdesk.plugins.registry import PluginRegistry
    from ragdesk.services.prompt_builder import RetrievalPromptBuilder

logger = structlog.get_logger(logger_name=__name__)


class ChatService:
    """Runs chat turns and owns per-conversation cancellation.

    Parameters
    ----------
    chat_provider:
        Streams raw model output.
    conversation_store:
        Persists conversations and messages.
    prompt_builder:
        Produces the system prompt for each turn.
    normalizer:
        Converts raw chunks into packets.
    default_model:
        Used when a turn does not name a model.
    history_limit:
        Number of most recent messages sent as context.
    plugin_registry:
        Source of tool definitions and executors.  Tools are only offered
        to the model when *tools_enabled* is set.
    """

    def __init__(
        self,
        chat_provider: IChatProvider,
        conversation_store: IConversationStore,
        prompt_builder: RetrievalPromptBuilder,
        normalizer: StreamNormalizer,
        default_model: str = "deepseek-r1",
        history_limit: int = 20,
        plugin_registry: PluginRegistry | None = None,
        tools_enabled: bool = False,
    ) -> None:
        self._chat_provider = chat_provider
        self._store = conversation_store
        self._prompt_builder = prompt_builder
        self._normalizer = normalizer
        self._default_model = default_model
        self._history_limit = history_limit
        self._plugin_registry = plugin_registry
        self._tools_enabled = tools_enabled and plugin_registry is not None
        self._active_streams: dict[str, CancellationToken] = {}

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    async def create_conversation(self, title: str | None = None) -> Conversation:
        return await self._store.create_conversation(title)

    async def list_conversations(self) -> list[Conversation]:
        return await self._store.list_conversations()

    async def get_conversation(self, conversation_id: str) -> ConversationDetail:
        detail = await self._store.get_conversation(conversation_id)
        if detail is None:
            raise NotFoundError(message=f"Conversation {conversation_id} not found")
        return detail

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    async def stream_chat(
        self,
        conversation_id: str,
        message: str,
        model: str | None = None,
        document_ids: list[str] | None = None,
        options: dict[str, Any] | None = None,
    ) -> AsyncIterator[StreamPacket]:
        """Run one chat turn, yielding packets in arrival order.

        Raises
        ------
        NotFoundError
            If the conversation does not exist (before any packet is yielded).
        """
        model_name = model or self._default_model
        log = logger.bind(conversation_id=conversation_id, model=model_name)

        await self._store.append_message(conversation_id, MessageRole.USER, message)
        history = await self._store.recent_messages(conversation_id, limit=self._history_limit)
        system_prompt = await self._prompt_builder.build_system_prompt(message, document_ids)

        messages = [{"role": MessageRole.SYSTEM.value, "content": system_prompt}]
        messages.extend(m.to_chat_message() for m in history)

        token = CancellationToken()
        self._active_streams[conversation_id] = token
        tools = self._plugin_registry.get_tool_definitions() if self._tools_enabled else None

        content_parts: list[str] = []
        thought_parts: list[str] = []
        log.info("chat_turn_started", history=len(history), tools=bool(tools))

        try:
            raw_stream = self._chat_provider.stream_chat(
                model_name,
                messages,
                options=options,
                cancellation_token=token,
                tools=tools,
            )
            async for packet in self._normalizer.normalize(raw_stream):
                if packet.type is StreamEventType.TOKEN and isinstance(packet.payload, str):
                    content_parts.append(packet.payload)
                elif packet.type is StreamEventType.THOUGHT and isinstance(packet.payload, str):
                    thought_parts.append(packet.payload)
                elif packet.type is StreamEventType.DONE:
                    content = "".join(content_parts)
                    thought = "".join(thought_parts)
                    await self._store.append_message(
                        conversation_id,
                        MessageRole.ASSISTANT,
                        content,
                        thought_process=thought or None,
                    )
                    log.info("assistant_message_saved", characters=len(content))

                yield packet

                if packet.type is StreamEventType.TOOL_START and self._tools_enabled:
                    yield await self._run_tool(packet)
        finally:
            if self._active_streams.get(conversation_id) is token:
                del self._active_streams[conversation_id]
            log.debug("chat_turn_finished", cancelled=token.cancelled)

    def stop(self, conversation_id: str) -> bool:
        """Cancel the active stream of a conversation.

        Returns ``False`` when no stream is active.
        """
        token = self._active_streams.pop(conversation_id, None)
        if token is None:
            return False
        token.cancel()
        logger.info("chat_stream_stopped", conversation_id=conversation_id)
        return True

    def is_streaming(self, conversation_id: str) -> bool:
        return conversation_id in self._active_streams

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    async def _run_tool(self, packet: StreamPacket) -> StreamPacket:
        payload = packet.payload if isinstance(packet.payload, dict) else {}
        tool = payload.get("tool", "unknown")
        args = payload.get("args") or {}
        try:
            result = await self._plugin_registry.execute_plugin(tool, args)
        except RagDeskError as exc:
            logger.warning("tool_execution_failed", tool=tool, error=str(exc))
            return StreamPacket.create(StreamEventType.TOOL_RESULT, {"tool": tool, "error": str(exc)})
        return StreamPacket.create(StreamEventType.TOOL_RESULT, {"tool": tool, "result": result})
