"""Tests for the message log implementations."""

import sqlite3

import pytest

from aistudy.agent.structs import Role, Turn
from aistudy.exceptions import ErrorKind, StorageError
from aistudy.storage.memory import InMemoryMessageLog
from aistudy.storage.sqlite import SqliteMessageLog


class TestSqliteMessageLog:
    @pytest.fixture
    def log(self, tmp_path):
        return SqliteMessageLog(tmp_path / "chat.db")

    @pytest.mark.asyncio
    async def test_round_trip_keeps_insertion_order(self, log):
        turns = [Turn.user("q1"), Turn.assistant('{"agentMessage":"a1"}'), Turn.system("s")]
        await log.insert_many(turns[:2])
        await log.insert(turns[2])

        stored = await log.get_all()

        assert stored == turns
        assert [t.role for t in stored] == [Role.USER, Role.ASSISTANT, Role.SYSTEM]
        assert stored[0].timestamp == turns[0].timestamp
        assert await log.count() == 3

    @pytest.mark.asyncio
    async def test_survives_reopening(self, tmp_path):
        path = tmp_path / "chat.db"
        await SqliteMessageLog(path).insert(Turn.user("remember me"))

        assert await SqliteMessageLog(path).get_all() == [Turn.user("remember me")]

    @pytest.mark.asyncio
    async def test_delete_all_empties_the_log(self, log):
        await log.insert_many([Turn.user("q1"), Turn.assistant("a1")])
        await log.delete_all()
        assert await log.get_all() == []
        assert await log.count() == 0

    @pytest.mark.asyncio
    async def test_insert_many_with_nothing_is_a_noop(self, log):
        await log.insert_many([])
        assert await log.count() == 0

    @pytest.mark.asyncio
    async def test_unwritable_path_raises_storage_error(self, tmp_path):
        log = SqliteMessageLog(tmp_path / "missing" / "dir" / "chat.db")
        with pytest.raises(StorageError) as exc_info:
            await log.insert(Turn.user("q1"))
        assert exc_info.value.kind is ErrorKind.STORAGE

    @pytest.mark.asyncio
    async def test_connection_is_closed_when_schema_setup_fails(self, tmp_path, monkeypatch):
        path = tmp_path / "chat.db"
        path.write_bytes(b"this is not a sqlite database " * 64)
        opened = []
        real_connect = sqlite3.connect

        def tracking_connect(*args, **kwargs):
            conn = _TrackedConnection(real_connect(*args, **kwargs))
            opened.append(conn)
            return conn

        monkeypatch.setattr(sqlite3, "connect", tracking_connect)

        with pytest.raises(StorageError):
            await SqliteMessageLog(path).get_all()

        assert len(opened) == 1
        assert opened[0].closed


class _TrackedConnection:
    """Delegates to a real connection and records whether it was closed."""

    def __init__(self, conn):
        self._conn = conn
        self.closed = False

    def execute(self, *args):
        return self._conn.execute(*args)

    def commit(self):
        self._conn.commit()

    def close(self):
        self.closed = True
        self._conn.close()


class TestInMemoryMessageLog:
    @pytest.mark.asyncio
    async def test_basic_operations(self):
        log = InMemoryMessageLog([Turn.user("seed")])
        await log.insert(Turn.assistant("a"))
        await log.insert_many([Turn.user("b"), Turn.assistant("c")])

        assert [t.content for t in await log.get_all()] == ["seed", "a", "b", "c"]
        assert await log.count() == 4

        await log.delete_all()
        assert await log.count() == 0

    @pytest.mark.asyncio
    async def test_get_all_returns_a_copy(self):
        log = InMemoryMessageLog()
        await log.insert(Turn.user("q"))
        (await log.get_all()).clear()
        assert await log.count() == 1
