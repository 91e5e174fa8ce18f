"""TranscriptStore: conversations, messages and full-text search.

Message rows are mirrored into the ``messages_fts`` FTS5 index by triggers
created in :mod:`wren.db`, so inserts, updates and deletes keep the index
in step within the same transaction.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from wren.memory.models import Conversation, ConversationMessage, TranscriptHit

if TYPE_CHECKING:
    from wren.db import Database

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50

_CONVERSATION_SELECT = """
SELECT c.id, c.title, c.summary, c.created_at, c.updated_at,
       (SELECT COUNT(*) FROM messages WHERE conversation_id = c.id) AS message_count
FROM conversations c
"""


def _now() -> str:
    return datetime.now(UTC).isoformat()


def to_fts_query(text: str) -> str:
    """Turn free text into an FTS5 query of quoted terms.

    Quoting every term keeps punctuation and FTS operators in user input
    (``"``, ``*``, ``AND``, ``-``) from being parsed as query syntax.
    """
    terms = re.findall(r"\w+", text)
    return " ".join(f'"{term}"' for term in terms)


class TranscriptStore:
    """Persists conversation transcripts."""

    def __init__(self, database: Database) -> None:
        self._db = database

    # -- Conversations -------------------------------------------------------

    async def create_conversation(self, title: str | None = None) -> int:
        now = _now()
        async with self._db.transaction() as db:
            cursor = await db.execute(
                "INSERT INTO conversations (title, created_at, updated_at) VALUES (?, ?, ?)",
                (title, now, now),
            )
            conversation_id = cursor.lastrowid

        logger.info("Created conversation %s", conversation_id)
        return conversation_id

    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        async with self._db.transaction() as db:
            cursor = await db.execute(
                _CONVERSATION_SELECT + "WHERE c.id = ?", (conversation_id,)
            )
            row = await cursor.fetchone()
        return Conversation(**dict(row)) if row else None

    async def list_conversations(self, limit: int = 50, offset: int = 0) -> list[Conversation]:
        """Most recently active conversations first."""
        async with self._db.transaction() as db:
            cursor = await db.execute(
                _CONVERSATION_SELECT + "ORDER BY c.updated_at DESC, c.id DESC LIMIT ? OFFSET ?",
                (limit, offset),
            )
            rows = await cursor.fetchall()
        return [Conversation(**dict(row)) for row in rows]

    async def update_title(self, conversation_id: int, title: str) -> bool:
        return await self._update_field(conversation_id, "title", title)

    async def update_summary(self, conversation_id: int, summary: str) -> bool:
        return await self._update_field(conversation_id, "summary", summary)

    async def _update_field(self, conversation_id: int, column: str, value: str) -> bool:
        async with self._db.transaction() as db:
            cursor = await db.execute(
                f"UPDATE conversations SET {column} = ?, updated_at = ? WHERE id = ?",  # noqa: S608
                (value, _now(), conversation_id),
            )
            return cursor.rowcount > 0

    async def delete_conversation(self, conversation_id: int) -> bool:
        """Delete a conversation and all of its messages.

        Returns True if the conversation existed.
        """
        async with self._db.transaction() as db:
            await db.execute(
                "DELETE FROM messages WHERE conversation_id = ?", (conversation_id,)
            )
            cursor = await db.execute(
                "DELETE FROM conversations WHERE id = ?", (conversation_id,)
            )
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Deleted conversation %s", conversation_id)
        return deleted

    # -- Messages ------------------------------------------------------------

    async def add_message(self, conversation_id: int, role: str, content: str) -> int | None:
        """Append a message and bump the conversation's ``updated_at``.

        Returns the message id, or None if the conversation does not exist.
        """
        now = _now()
        async with self._db.transaction() as db:
            cursor = await db.execute(
                "UPDATE conversations SET updated_at = ? WHERE id = ?",
                (now, conversation_id),
            )
            if cursor.rowcount == 0:
                logger.warning("Cannot add message: conversation %s not found", conversation_id)
                return None

            cursor = await db.execute(
                """
                INSERT INTO messages (conversation_id, role, content, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (conversation_id, role, content, now),
            )
            message_id = cursor.lastrowid

        logger.debug("Stored %s message %s in conversation %s", role, message_id, conversation_id)
        return message_id

    async def get_messages(self, conversation_id: int) -> list[ConversationMessage]:
        """All messages of a conversation, oldest first."""
        async with self._db.transaction() as db:
            cursor = await db.execute(
                """
                SELECT id, conversation_id, role, content, created_at
                FROM messages WHERE conversation_id = ?
                ORDER BY created_at ASC, id ASC
                """,
                (conversation_id,),
            )
            rows = await cursor.fetchall()
        return [ConversationMessage(**dict(row)) for row in rows]

    # -- Search --------------------------------------------------------------

    async def search_transcripts(self, query: str, limit: int = SEARCH_LIMIT) -> list[TranscriptHit]:
        """Full-text search over every message, best matches first."""
        fts_query = to_fts_query(query)
        if not fts_query:
            return []

        async with self._db.transaction() as db:
            cursor = await db.execute(
                """
                SELECT m.id AS message_id, m.conversation_id, m.role, m.content,
                       m.created_at, c.title AS conversation_title,
                       c.summary AS conversation_summary
                FROM messages_fts
                JOIN messages m ON m.id = messages_fts.rowid
                JOIN conversations c ON c.id = m.conversation_id
                WHERE messages_fts MATCH ?
                ORDER BY messages_fts.rank
                LIMIT ?
                """,
                (fts_query, limit),
            )
            rows = await cursor.fetchall()

        hits = [TranscriptHit(**dict(row)) for row in rows]
        logger.debug("Transcript search for %r returned %d hits", query, len(hits))
        return hits
