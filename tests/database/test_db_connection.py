"""
Tests for the connection manager's transaction handling.
"""

import pytest
import pytest_asyncio

from modrelay.database.db_connection import ConnectionManager


@pytest_asyncio.fixture
async def manager(tmp_path):
    conn_manager = ConnectionManager()
    await conn_manager.open(tmp_path / "data" / "conn.db")
    async with conn_manager.transaction() as conn:
        await conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    yield conn_manager
    await conn_manager.close()


async def count_items(manager) -> int:
    async with manager.read() as conn:
        async with conn.execute("SELECT COUNT(*) FROM items") as cursor:
            (count,) = await cursor.fetchone()
    return count


@pytest.mark.asyncio
async def test_connection_before_open_raises():
    with pytest.raises(RuntimeError):
        _ = ConnectionManager().connection


@pytest.mark.asyncio
async def test_open_creates_directory_and_uses_wal(manager, tmp_path):
    assert manager.is_open
    assert manager.path == tmp_path / "data" / "conn.db"
    async with manager.read() as conn:
        async with conn.execute("PRAGMA journal_mode") as cursor:
            (mode,) = await cursor.fetchone()
    assert mode.lower() == "wal"


@pytest.mark.asyncio
async def test_open_twice_keeps_connection(manager):
    before = manager.connection
    await manager.open(manager.path)
    assert manager.connection is before


@pytest.mark.asyncio
async def test_transaction_commits(manager):
    async with manager.transaction() as conn:
        await conn.execute("INSERT INTO items (name) VALUES ('a')")
        await conn.execute("INSERT INTO items (name) VALUES ('b')")

    assert await count_items(manager) == 2


@pytest.mark.asyncio
async def test_transaction_rolls_back_every_statement(manager):
    with pytest.raises(RuntimeError):
        async with manager.transaction() as conn:
            await conn.execute("INSERT INTO items (name) VALUES ('a')")
            raise RuntimeError("abort")

    assert await count_items(manager) == 0

    # the connection is usable again afterwards
    async with manager.transaction() as conn:
        await conn.execute("INSERT INTO items (name) VALUES ('c')")
    assert await count_items(manager) == 1


@pytest.mark.asyncio
async def test_close_is_idempotent(manager):
    await manager.close()
    await manager.close()
    assert not manager.is_open
