"""
Pytest configuration and fixtures for modrelay tests.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from modrelay.database.database import Database  # noqa: E402

GUILD_ID = 20
CHANNEL_ID = 10
STAFF_ID = 1
USER_ID = 42
FIXED_NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db(tmp_path: Path):
    """A fresh, initialized database in a temporary directory."""
    database = Database(tmp_path / "test.db")
    assert await database.initialize()
    yield database
    await database.shutdown()


@pytest_asyncio.fixture
async def open_thread(db: Database) -> int:
    """An open thread binding CHANNEL_ID to USER_ID; returns its thread_id."""
    return await db.create_thread(GUILD_ID, CHANNEL_ID, USER_ID)


@pytest.fixture
def http_error():
    """Build a py-cord HTTP exception without a real aiohttp response."""
    def build(exc_cls, status: int = 403, message: str = "error"):
        response = SimpleNamespace(status=status, reason=message)
        return exc_cls(response, message)
    return build


@pytest.fixture
def dm_user():
    """A Discord user whose DMs succeed."""
    return SimpleNamespace(id=USER_ID, send=AsyncMock(return_value=SimpleNamespace(id=9001)))


@pytest.fixture
def bot(dm_user):
    """A bot whose user cache knows ``dm_user``."""
    fake = MagicMock()
    fake.get_user.side_effect = lambda user_id: dm_user if user_id == USER_ID else None
    fake.fetch_user = AsyncMock()
    return fake


@pytest.fixture
def member():
    return SimpleNamespace(
        id=USER_ID,
        display_name="Visitor",
        send=AsyncMock(return_value=SimpleNamespace(id=7001)),
    )


@pytest.fixture
def staff():
    return SimpleNamespace(
        id=STAFF_ID,
        display_name="Mod",
        display_avatar=SimpleNamespace(url="https://cdn.example/avatar.png"),
    )


@pytest.fixture
def guild(member):
    fake = MagicMock()
    fake.id = GUILD_ID
    fake.name = "Support Guild"
    fake.icon = None
    fake.get_member.side_effect = lambda user_id: member if user_id == USER_ID else None
    fake.fetch_member = AsyncMock()
    return fake


@pytest.fixture
def make_attachment():
    def build(filename: str = "screenshot.png", content_type: str | None = "image/png"):
        return SimpleNamespace(
            filename=filename,
            content_type=content_type,
            url=f"https://cdn.example/attachments/{filename}",
        )
    return build


@pytest.fixture
def make_message(staff):
    def build(content: str = "Hello there", author_id: int = STAFF_ID, attachments=None, message_id: int = 555):
        return SimpleNamespace(
            id=message_id,
            author=SimpleNamespace(id=author_id),
            content=content,
            attachments=list(attachments or []),
        )
    return build


@pytest.fixture
def make_ctx(guild, staff):
    """Application context for a command invoked in CHANNEL_ID."""
    def build(channel_id: int = CHANNEL_ID, locale=None):
        return SimpleNamespace(
            channel_id=channel_id,
            guild_id=GUILD_ID,
            guild=guild,
            author=staff,
            user=staff,
            locale=locale,
            respond=AsyncMock(),
        )
    return build
