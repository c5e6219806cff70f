"""SQLite-backed conversation store.

Persists conversations and their messages to a local SQLite database at
``data/conversations.db``.  Uses ``aiosqlite`` for async I/O and opens a
short-lived connection per operation.

Messages carry an autoincrement ``seq`` column; history ordering uses it
rather than ``created_at`` because several messages can share a timestamp.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import structlog

from ragdesk.interfaces.conversation_store import IConversationStore
from ragdesk.models.chat import Conversation, ConversationDetail, Message, MessageRole
from ragdesk.utils.errors import NotFoundError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/conversations.db")

_CREATE_TABLES_SQL = [
    """\
CREATE TABLE IF NOT EXISTS conversations (
    id          TEXT PRIMARY KEY,
    title       TEXT NOT NULL,
    summary     TEXT,
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS messages (
    seq             INTEGER PRIMARY KEY AUTOINCREMENT,
    id              TEXT    NOT NULL UNIQUE,
    conversation_id TEXT    NOT NULL REFERENCES conversations(id) ON DELETE CASCADE,
    role            TEXT    NOT NULL,
    content         TEXT    NOT NULL,
    thought_process TEXT,
    created_at      TEXT    NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id, seq);",
]

_MESSAGE_COLUMNS = "id, conversation_id, role, content, thought_process, created_at"


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class SQLiteConversationStore(IConversationStore):
    """SQLite-backed conversation persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            for sql in _CREATE_TABLES_SQL:
                await db.execute(sql)
            await db.commit()
        logger.info("conversation_db_initialized", path=str(self._db_path))

    async def create_conversation(self, title: str | None = None) -> Conversation:
        conversation = Conversation(title=title or "New Conversation")
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                "INSERT INTO conversations (id, title, summary, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    conversation.id,
                    conversation.title,
                    conversation.summary,
                    conversation.created_at.isoformat(),
                    conversation.updated_at.isoformat(),
                ),
            )
            await db.commit()
        logger.info("conversation_created", conversation_id=conversation.id)
        return conversation

    async def list_conversations(self) -> list[Conversation]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT id, title, summary, created_at, updated_at "
                "FROM conversations ORDER BY updated_at DESC"
            )
            rows = await cursor.fetchall()
        return [Conversation(**dict(r)) for r in rows]

    async def get_conversation(self, conversation_id: str) -> ConversationDetail | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT id, title, summary, created_at, updated_at FROM conversations WHERE id = ?",
                (conversation_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            cursor = await db.execute(
                f"SELECT {_MESSAGE_COLUMNS} FROM messages WHERE conversation_id = ? ORDER BY seq",
                (conversation_id,),
            )
            message_rows = await cursor.fetchall()

        return ConversationDetail(
            conversation=Conversation(**dict(row)),
            messages=[Message(**dict(r)) for r in message_rows],
        )

    async def append_message(
        self,
        conversation_id: str,
        role: MessageRole,
        content: str,
        thought_process: str | None = None,
    ) -> Message:
        message = Message(
            conversation_id=conversation_id,
            role=role,
            content=content,
            thought_process=thought_process,
        )
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(
                "UPDATE conversations SET updated_at = ? WHERE id = ?",
                (message.created_at.isoformat(), conversation_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError(
                    message=f"Conversation {conversation_id} not found",
                    provider_name="sqlite",
                )
            await db.execute(
                f"INSERT INTO messages ({_MESSAGE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    message.id,
                    conversation_id,
                    message.role.value,
                    message.content,
                    message.thought_process,
                    message.created_at.isoformat(),
                ),
            )
            await db.commit()

        logger.debug(
            "message_appended",
            conversation_id=conversation_id,
            role=message.role.value,
            length=len(content),
        )
        return message

    async def recent_messages(self, conversation_id: str, limit: int = 20) -> list[Message]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT {_MESSAGE_COLUMNS} FROM messages "
                "WHERE conversation_id = ? ORDER BY seq DESC LIMIT ?",
                (conversation_id, limit),
            )
            rows = await cursor.fetchall()
        return [Message(**dict(r)) for r in reversed(rows)]
