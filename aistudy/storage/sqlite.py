"""
SQLite message log.

Schema mirrors the chat table of the mobile app: one row per turn with role,
content and timestamp, ordered by an autoincrement id. Every call opens its
own connection inside a worker thread, so the event loop never blocks on
disk I/O.
"""

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import List, Sequence

from aistudy.agent.structs import Role, Turn
from aistudy.exceptions.base import wrap_exception
from aistudy.exceptions.storage import StorageError

from .base import MessageLog

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS chat_message (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    timestamp REAL NOT NULL
)
"""

_HINT = "The chat history database could not be accessed."


class SqliteMessageLog(MessageLog):
    def __init__(self, path: Path):
        self.path = Path(path)
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.path))
        if not self._initialized:
            try:
                conn.execute(_SCHEMA)
                conn.commit()
            except sqlite3.Error:
                conn.close()
                raise
            self._initialized = True
        return conn

    @wrap_exception(StorageError, user_hint=_HINT)
    def _insert_rows(self, turns: Sequence[Turn]) -> None:
        conn = self._connect()
        try:
            # The connection context manager commits or rolls back as one unit.
            with conn:
                conn.executemany(
                    "INSERT INTO chat_message (role, content, timestamp) VALUES (?, ?, ?)",
                    [(t.role.value, t.content, t.timestamp) for t in turns],
                )
        finally:
            conn.close()

    @wrap_exception(StorageError, user_hint=_HINT)
    def _select_all(self) -> List[Turn]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT role, content, timestamp FROM chat_message ORDER BY id"
            ).fetchall()
        finally:
            conn.close()
        return [Turn(Role(role), content, timestamp) for role, content, timestamp in rows]

    @wrap_exception(StorageError, user_hint=_HINT)
    def _delete_rows(self) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute("DELETE FROM chat_message")
        finally:
            conn.close()

    @wrap_exception(StorageError, user_hint=_HINT)
    def _count_rows(self) -> int:
        conn = self._connect()
        try:
            return conn.execute("SELECT COUNT(*) FROM chat_message").fetchone()[0]
        finally:
            conn.close()

    async def insert(self, turn: Turn) -> None:
        await asyncio.to_thread(self._insert_rows, [turn])

    async def insert_many(self, turns: Sequence[Turn]) -> None:
        if not turns:
            return
        await asyncio.to_thread(self._insert_rows, list(turns))

    async def get_all(self) -> List[Turn]:
        turns = await asyncio.to_thread(self._select_all)
        logger.debug("Loaded %d turns from %s", len(turns), self.path)
        return turns

    async def delete_all(self) -> None:
        await asyncio.to_thread(self._delete_rows)
        logger.info("Message log %s wiped", self.path)

    async def count(self) -> int:
        return await asyncio.to_thread(self._count_rows)
