"""MemoryStore: versioned user facts in SQLite.

Corrections never destroy history. :meth:`MemoryStore.supersede_memory`
inserts the corrected fact with a ``supersedes`` back-reference and then
drops the old row's confidence to 0, both in one transaction. Rows with
confidence 0 are retired: they stay retrievable by id but are excluded
from every other read.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from wren.memory.models import (
    Memory,
    MemoryCategory,
    MemorySource,
    normalize_subject,
)

if TYPE_CHECKING:
    from wren.db import Database

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, content, category, source, subject, confidence, supersedes, "
    "created_at, updated_at, last_confirmed"
)

# Words this short are too common to be useful for duplicate detection.
_MIN_KEYWORD_LENGTH = 4
_MAX_KEYWORDS = 3


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MemoryStore:
    """Facts about the user, with supersession-based corrections."""

    def __init__(self, database: Database) -> None:
        self._db = database

    # -- Write ---------------------------------------------------------------

    async def add_memory(
        self,
        content: str,
        category: MemoryCategory,
        source: MemorySource = MemorySource.EXPLICIT,
        subject: str | None = None,
        confidence: float = 1.0,
    ) -> int | None:
        """Insert a new memory and return its id.

        Returns None if *confidence* is outside ``[0, 1]``.
        """
        if not 0.0 <= confidence <= 1.0:
            logger.warning("Rejected memory with confidence %s", confidence)
            return None

        now = _now()
        async with self._db.transaction() as db:
            cursor = await db.execute(
                """
                INSERT INTO memories
                    (content, category, source, subject, confidence,
                     created_at, updated_at, last_confirmed)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    content,
                    MemoryCategory(category).value,
                    MemorySource(source).value,
                    normalize_subject(subject),
                    confidence,
                    now,
                    now,
                    now,
                ),
            )
            new_id = cursor.lastrowid

        logger.info("Memory added (id: %s) [%s] %s", new_id, category, content[:80])
        return new_id

    async def update_memory(
        self,
        memory_id: int,
        *,
        content: str | None = None,
        category: MemoryCategory | None = None,
        subject: str | None = None,
        confidence: float | None = None,
    ) -> bool:
        """Change fields of an existing memory in place.

        ``supersedes`` is deliberately not updatable. Returns True if a row
        was updated.
        """
        if confidence is not None and not 0.0 <= confidence <= 1.0:
            return False

        updates: list[str] = []
        values: list[object] = []
        if content is not None:
            updates.append("content = ?")
            values.append(content)
        if category is not None:
            updates.append("category = ?")
            values.append(MemoryCategory(category).value)
        if subject is not None:
            updates.append("subject = ?")
            values.append(normalize_subject(subject))
        if confidence is not None:
            updates.append("confidence = ?")
            values.append(confidence)

        now = _now()
        updates.extend(["updated_at = ?", "last_confirmed = ?"])
        values.extend([now, now, memory_id])

        async with self._db.transaction() as db:
            cursor = await db.execute(
                f"UPDATE memories SET {', '.join(updates)} WHERE id = ?",  # noqa: S608
                tuple(values),
            )
            updated = cursor.rowcount > 0

        if updated:
            logger.info("Memory updated (id: %s)", memory_id)
        return updated

    async def supersede_memory(
        self,
        old_id: int,
        new_content: str,
        category: MemoryCategory,
        subject: str | None = None,
    ) -> int | None:
        """Replace memory *old_id* with a corrected version.

        The new row inherits the old row's subject when *subject* is not
        given. Returns the new id, or None if *old_id* does not exist.
        """
        now = _now()
        async with self._db.transaction() as db:
            cursor = await db.execute(
                "SELECT subject FROM memories WHERE id = ?", (old_id,)
            )
            old = await cursor.fetchone()
            if old is None:
                logger.warning("Cannot supersede memory %s: not found", old_id)
                return None

            effective_subject = normalize_subject(subject) or old["subject"]

            # Insert before tombstoning: the new fact must exist before the
            # old one stops being live.
            cursor = await db.execute(
                """
                INSERT INTO memories
                    (content, category, source, subject, confidence, supersedes,
                     created_at, updated_at, last_confirmed)
                VALUES (?, ?, ?, ?, 1.0, ?, ?, ?, ?)
                """,
                (
                    new_content,
                    MemoryCategory(category).value,
                    MemorySource.EXPLICIT.value,
                    effective_subject,
                    old_id,
                    now,
                    now,
                    now,
                ),
            )
            new_id = cursor.lastrowid

            await db.execute(
                "UPDATE memories SET confidence = 0.0, updated_at = ? WHERE id = ?",
                (now, old_id),
            )

        logger.info("Memory %s superseded by %s", old_id, new_id)
        return new_id

    async def delete_memory(self, memory_id: int) -> bool:
        """Hard-delete a memory. Returns True if a row was removed."""
        async with self._db.transaction() as db:
            cursor = await db.execute("DELETE FROM memories WHERE id = ?", (memory_id,))
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Memory deleted (id: %s)", memory_id)
        return deleted

    # -- Read ----------------------------------------------------------------

    async def _query(self, sql: str, params: tuple = ()) -> list[Memory]:
        async with self._db.transaction() as db:
            cursor = await db.execute(sql, params)
            rows = await cursor.fetchall()
        return [Memory.from_row(row) for row in rows]

    async def get_memory(self, memory_id: int) -> Memory | None:
        """Fetch a memory by id, including retired ones."""
        rows = await self._query(
            f"SELECT {_COLUMNS} FROM memories WHERE id = ?",  # noqa: S608
            (memory_id,),
        )
        return rows[0] if rows else None

    async def get_all_memories(self, include_superseded: bool = False) -> list[Memory]:
        """All memories, newest first. Retired rows only on request."""
        where = "" if include_superseded else "WHERE confidence > 0"
        return await self._query(
            f"SELECT {_COLUMNS} FROM memories {where} "  # noqa: S608
            "ORDER BY created_at DESC, id DESC"
        )

    async def search_memories(self, keyword: str) -> list[Memory]:
        """Case-insensitive substring search over live memories.

        Ordered by confidence, then most recent first.
        """
        memories = await self._query(
            f"""
            SELECT {_COLUMNS} FROM memories
            WHERE content LIKE ? ESCAPE '\\' AND confidence > 0
            ORDER BY confidence DESC, created_at DESC, id DESC
            """,  # noqa: S608
            (f"%{_escape_like(keyword)}%",),
        )
        logger.debug("Search for %r returned %d memories", keyword, len(memories))
        return memories

    async def get_memories_by_subject(self, subject: str) -> list[Memory]:
        """Live memories whose comma-separated subject list contains *subject*.

        The token may be the whole field or sit at the start, middle or end
        of the list; a partial token ("gab" for "gabby") never matches.
        """
        token = subject.strip().lower()
        if not token:
            return []
        escaped = _escape_like(token)
        return await self._query(
            f"""
            SELECT {_COLUMNS} FROM memories
            WHERE (subject = ?
                   OR subject LIKE ? ESCAPE '\\'
                   OR subject LIKE ? ESCAPE '\\'
                   OR subject LIKE ? ESCAPE '\\')
              AND confidence > 0
            ORDER BY confidence DESC, created_at DESC, id DESC
            """,  # noqa: S608
            (token, f"{escaped},%", f"%,{escaped},%", f"%,{escaped}"),
        )

    async def get_memories_by_category(self, category: MemoryCategory) -> list[Memory]:
        return await self._query(
            f"SELECT {_COLUMNS} FROM memories "  # noqa: S608
            "WHERE category = ? AND confidence > 0 ORDER BY created_at DESC, id DESC",
            (MemoryCategory(category).value,),
        )

    async def get_all_subjects(self) -> list[str]:
        """Sorted, de-duplicated subject tokens across live memories."""
        async with self._db.transaction() as db:
            cursor = await db.execute(
                "SELECT DISTINCT subject FROM memories "
                "WHERE subject IS NOT NULL AND confidence > 0"
            )
            rows = await cursor.fetchall()

        subjects: set[str] = set()
        for row in rows:
            for token in row[0].split(","):
                token = token.strip().lower()
                if token:
                    subjects.add(token)
        return sorted(subjects)

    async def find_similar_memories(
        self, content: str, subject: str | None = None
    ) -> list[Memory]:
        """Lexical duplicate check used before storing a new memory.

        Collects memories about *subject*, then memories containing any of
        the first few significant words of *content*.
        """
        words = [
            w
            for w in re.split(r"\W+", content.lower())
            if len(w) >= _MIN_KEYWORD_LENGTH
        ]
        if not words:
            return []

        found: dict[int, Memory] = {}
        if subject:
            for memory in await self.get_memories_by_subject(subject):
                found.setdefault(memory.id, memory)

        for word in words[:_MAX_KEYWORDS]:
            for memory in await self.search_memories(word):
                found.setdefault(memory.id, memory)

        return list(found.values())

    # -- Prompt --------------------------------------------------------------

    async def render_for_prompt(self) -> str:
        """Format live memories as a block for the system prompt.

        Memories with subjects are grouped under each subject
        (alphabetically); the rest are listed under "General" in category
        order. Anything below full confidence is marked "(uncertain)".
        """
        memories = await self.get_all_memories()
        if not memories:
            return ""

        by_subject: dict[str, list[Memory]] = defaultdict(list)
        general: dict[MemoryCategory, list[Memory]] = defaultdict(list)
        for memory in memories:
            if memory.subjects:
                for subject in memory.subjects:
                    by_subject[subject].append(memory)
            else:
                general[memory.category].append(memory)

        lines = ["Here are things you remember:"]
        for subject in sorted(by_subject):
            lines.append("")
            lines.append(f"About {subject.title()}:")
            for memory in by_subject[subject]:
                marker = " (uncertain)" if memory.confidence < 1.0 else ""
                lines.append(f"- {memory.content}{marker}")

        if general:
            lines.append("")
            lines.append("General:")
            for category in MemoryCategory:
                for memory in general.get(category, []):
                    marker = " (uncertain)" if memory.confidence < 1.0 else ""
                    lines.append(f"- [{category.display_name}] {memory.content}{marker}")

        return "\n".join(lines)
