from datetime import timedelta
from unittest.mock import AsyncMock

import discord
import pytest

from modrelay.threads.block_store import BlockStore
from modrelay.threads.errors import (
    InvalidDuration,
    NoOpenThread,
    NotBlocked,
    ReasonRequired,
    UserUnresolvable,
)

from conftest import CHANNEL_ID, FIXED_NOW, GUILD_ID, USER_ID


@pytest.fixture
def store(db, bot):
    return BlockStore(db, bot, clock=lambda: FIXED_NOW)


async def count_blocks(db) -> int:
    async with db.connection.read() as conn:
        async with conn.execute("SELECT COUNT(*) FROM blocks") as cursor:
            row = await cursor.fetchone()
    return row[0]


@pytest.mark.asyncio
async def test_block_with_duration_sets_expiry_and_notifies(store, db, open_thread, dm_user):
    record = await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam", raw_duration="2d")
    await store.wait_for_notifications()

    assert record.user_id == USER_ID
    assert record.guild_id == GUILD_ID
    assert record.expires_at == FIXED_NOW + timedelta(milliseconds=172_800_000)

    stored = await db.get_block(USER_ID, GUILD_ID)
    assert stored is not None
    assert stored.expires_at == record.expires_at

    dm_user.send.assert_awaited_once()
    content = dm_user.send.await_args.kwargs["content"]
    assert "spam" in content
    assert f"<t:{int(record.expires_at.timestamp())}:R>" in content


@pytest.mark.asyncio
async def test_block_without_duration_is_permanent(store, db, open_thread, dm_user):
    record = await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="abuse", raw_duration=None)
    await store.wait_for_notifications()

    assert record.expires_at is None
    assert await store.is_blocked(USER_ID, GUILD_ID, now=FIXED_NOW + timedelta(days=3650))
    assert "never" in dm_user.send.await_args.kwargs["content"]


@pytest.mark.asyncio
async def test_no_open_thread_is_checked_first(store, db, bot):
    with pytest.raises(NoOpenThread):
        await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason=None, raw_duration="garbage")

    assert await count_blocks(db) == 0
    bot.get_user.assert_not_called()


@pytest.mark.asyncio
async def test_closed_thread_does_not_count_as_open(store, db, open_thread):
    await db.close_thread(open_thread, closed_by_id=1)

    with pytest.raises(NoOpenThread):
        await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam", raw_duration=None)


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", [None, "", "   "])
async def test_reason_is_required(store, db, open_thread, reason):
    with pytest.raises(ReasonRequired):
        await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason=reason, raw_duration="1h")
    assert await count_blocks(db) == 0


@pytest.mark.asyncio
async def test_invalid_duration_writes_nothing(store, db, open_thread):
    with pytest.raises(InvalidDuration):
        await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam", raw_duration="-3")
    assert await count_blocks(db) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["10000000000", "99999999999w"])
async def test_duration_past_representable_dates_is_invalid(store, db, open_thread, bot, raw):
    with pytest.raises(InvalidDuration):
        await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam", raw_duration=raw)
    assert await count_blocks(db) == 0
    bot.get_user.assert_not_called()


@pytest.mark.asyncio
async def test_unresolvable_user(db, open_thread, bot, http_error):
    bot.get_user.side_effect = lambda user_id: None
    bot.fetch_user = AsyncMock(side_effect=http_error(discord.NotFound, 404, "Unknown User"))
    store = BlockStore(db, bot, clock=lambda: FIXED_NOW)

    with pytest.raises(UserUnresolvable):
        await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam", raw_duration="1h")
    assert await count_blocks(db) == 0


@pytest.mark.asyncio
async def test_upsert_overwrites_expiry_instead_of_duplicating(store, db):
    first = FIXED_NOW + timedelta(hours=1)
    second = FIXED_NOW + timedelta(minutes=5)

    await store.upsert_block(USER_ID, GUILD_ID, first)
    record = await store.upsert_block(USER_ID, GUILD_ID, second)

    assert record.expires_at == second
    assert await count_blocks(db) == 1
    assert (await store.get_block(USER_ID, GUILD_ID)).expires_at == second


@pytest.mark.asyncio
async def test_upsert_can_turn_timed_block_permanent(store):
    await store.upsert_block(USER_ID, GUILD_ID, FIXED_NOW + timedelta(hours=1))
    await store.upsert_block(USER_ID, GUILD_ID, None)

    record = await store.get_block(USER_ID, GUILD_ID)
    assert record is not None
    assert record.is_permanent


@pytest.mark.asyncio
async def test_repeat_block_replaces_rather_than_stacks(store, open_thread):
    await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam", raw_duration="1h")
    record = await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam again", raw_duration="30")
    await store.wait_for_notifications()

    assert record.expires_at == FIXED_NOW + timedelta(minutes=30)


@pytest.mark.asyncio
async def test_expiry_is_evaluated_at_read_time(store):
    await store.upsert_block(USER_ID, GUILD_ID, FIXED_NOW + timedelta(minutes=10))

    assert await store.is_blocked(USER_ID, GUILD_ID, now=FIXED_NOW)
    assert not await store.is_blocked(USER_ID, GUILD_ID, now=FIXED_NOW + timedelta(minutes=10))
    # The row itself is kept; expiry is not a deletion
    assert await store.get_block(USER_ID, GUILD_ID) is not None


@pytest.mark.asyncio
async def test_unknown_user_is_not_blocked(store):
    assert not await store.is_blocked(USER_ID, GUILD_ID)


@pytest.mark.asyncio
async def test_failed_notification_keeps_block(store, db, open_thread, dm_user, http_error):
    dm_user.send.side_effect = http_error(discord.Forbidden, 403, "Cannot send messages to this user")

    record = await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam", raw_duration="1h")
    await store.wait_for_notifications()

    assert record is not None
    assert await db.get_block(USER_ID, GUILD_ID) is not None


@pytest.mark.asyncio
async def test_unexpected_notification_error_is_swallowed(store, db, open_thread, dm_user):
    dm_user.send.side_effect = RuntimeError("socket closed")

    await store.block_thread_user(CHANNEL_ID, GUILD_ID, reason="spam", raw_duration=None)
    await store.wait_for_notifications()

    assert await db.get_block(USER_ID, GUILD_ID) is not None


@pytest.mark.asyncio
async def test_unblock_thread_user(store, open_thread):
    await store.upsert_block(USER_ID, GUILD_ID, None)

    thread = await store.unblock_thread_user(CHANNEL_ID, GUILD_ID)

    assert thread.user_id == USER_ID
    assert await store.get_block(USER_ID, GUILD_ID) is None
    with pytest.raises(NotBlocked):
        await store.unblock_thread_user(CHANNEL_ID, GUILD_ID)


@pytest.mark.asyncio
async def test_blocks_are_scoped_per_guild(store):
    await store.upsert_block(USER_ID, GUILD_ID, None)

    assert await store.is_blocked(USER_ID, GUILD_ID)
    assert not await store.is_blocked(USER_ID, GUILD_ID + 1)
