"""SQLite access shared by the memory and transcript stores.

Every statement batch goes through :meth:`Database.transaction`, which holds
a single ``asyncio.Lock`` for the duration of the batch, opens an
``aiosqlite`` connection, and commits on success or rolls back on error.
That makes the database single-writer from the application's point of
view and lets a multi-statement operation (e.g. supersession) land
atomically.

Schema versions (``PRAGMA user_version``):

- **1**: bare ``memories(id, content, category, created_at)``
- **2**: memories gain source/subject/confidence/supersedes/timestamps
- **3**: conversations, messages and the ``messages_fts`` index
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import aiosqlite

from wren.config import settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 3

_MEMORIES_SCHEMA = """
CREATE TABLE IF NOT EXISTS memories (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    content        TEXT NOT NULL,
    category       TEXT NOT NULL,
    source         TEXT NOT NULL DEFAULT 'explicit',
    subject        TEXT,
    confidence     REAL NOT NULL DEFAULT 1.0
                   CHECK (confidence >= 0.0 AND confidence <= 1.0),
    supersedes     INTEGER,
    created_at     TEXT NOT NULL,
    updated_at     TEXT NOT NULL,
    last_confirmed TEXT
);
CREATE INDEX IF NOT EXISTS idx_memories_subject ON memories(subject);
"""

_TRANSCRIPT_SCHEMA = """
CREATE TABLE IF NOT EXISTS conversations (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    title      TEXT,
    summary    TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS messages (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    conversation_id INTEGER NOT NULL
                    REFERENCES conversations(id) ON DELETE CASCADE,
    role            TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
    content         TEXT NOT NULL,
    created_at      TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id);
CREATE INDEX IF NOT EXISTS idx_conversations_updated ON conversations(updated_at DESC);

CREATE VIRTUAL TABLE IF NOT EXISTS messages_fts USING fts5(
    content,
    content='messages',
    content_rowid='id'
);

CREATE TRIGGER IF NOT EXISTS messages_ai AFTER INSERT ON messages BEGIN
    INSERT INTO messages_fts(rowid, content) VALUES (new.id, new.content);
END;
CREATE TRIGGER IF NOT EXISTS messages_ad AFTER DELETE ON messages BEGIN
    INSERT INTO messages_fts(messages_fts, rowid, content)
    VALUES ('delete', old.id, old.content);
END;
CREATE TRIGGER IF NOT EXISTS messages_au AFTER UPDATE ON messages BEGIN
    INSERT INTO messages_fts(messages_fts, rowid, content)
    VALUES ('delete', old.id, old.content);
    INSERT INTO messages_fts(rowid, content) VALUES (new.id, new.content);
END;
"""

# Columns a v1 memories table lacks, in the order they were introduced.
_V2_COLUMNS = (
    ("source", "TEXT NOT NULL DEFAULT 'explicit'"),
    ("subject", "TEXT"),
    ("confidence", "REAL NOT NULL DEFAULT 1.0"),
    ("supersedes", "INTEGER"),
    ("updated_at", "TEXT"),
    ("last_confirmed", "TEXT"),
)


class Database:
    """Serialized access to one SQLite file.

    Pass an explicit *path* for test isolation (e.g. ``tmp_path / "test.db"``).
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or settings.database_path
        self._lock = asyncio.Lock()
        self._initialised = False

    @property
    def path(self) -> Path:
        return self._path

    # -- Internal helpers ------------------------------------------------------

    async def _open(self) -> aiosqlite.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        db = await aiosqlite.connect(str(self._path))
        db.row_factory = aiosqlite.Row
        try:
            await db.execute("PRAGMA foreign_keys = ON")
            await db.execute("PRAGMA busy_timeout = 5000")
            if not self._initialised:
                await _migrate(db)
                await db.commit()
                self._initialised = True
        except BaseException:
            await db.close()
            raise
        return db

    # -- Public API --------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield a connection whose statements commit together.

        The lock is held until the commit (or rollback) completes, so no
        other batch can interleave with this one.
        """
        async with self._lock:
            db = await self._open()
            try:
                yield db
                await db.commit()
            except BaseException:
                await db.rollback()
                raise
            finally:
                await db.close()

    async def schema_version(self) -> int:
        async with self.transaction() as db:
            cursor = await db.execute("PRAGMA user_version")
            row = await cursor.fetchone()
            return int(row[0])


async def _has_table(db: aiosqlite.Connection, name: str) -> bool:
    cursor = await db.execute(
        "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
    )
    return await cursor.fetchone() is not None


async def _migrate(db: aiosqlite.Connection) -> None:
    """Bring the schema up to ``SCHEMA_VERSION``."""
    cursor = await db.execute("PRAGMA user_version")
    row = await cursor.fetchone()
    version = int(row[0])

    # Databases from before versioning have a memories table but no version.
    if version == 0 and await _has_table(db, "memories"):
        version = 1

    if version >= SCHEMA_VERSION:
        return

    logger.info("Migrating database schema from v%d to v%d", version, SCHEMA_VERSION)

    if version == 0:
        await db.executescript(_MEMORIES_SCHEMA + _TRANSCRIPT_SCHEMA)
    else:
        if version < 2:
            await _migrate_v1_to_v2(db)
        if version < 3:
            await db.executescript(_TRANSCRIPT_SCHEMA)

    await db.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")


async def _migrate_v1_to_v2(db: aiosqlite.Connection) -> None:
    cursor = await db.execute("PRAGMA table_info(memories)")
    existing = {row[1] for row in await cursor.fetchall()}

    for column, ddl in _V2_COLUMNS:
        if column not in existing:
            await db.execute(f"ALTER TABLE memories ADD COLUMN {column} {ddl}")

    await db.execute(
        "UPDATE memories SET updated_at = created_at WHERE updated_at IS NULL"
    )
    await db.execute(
        "CREATE INDEX IF NOT EXISTS idx_memories_subject ON memories(subject)"
    )
