from __future__ import annotations

from typing import Optional, Union

from modrelay.database.database import Database
from modrelay.datatypes.discord_datatypes import ChannelID
from modrelay.datatypes.thread_datatypes import Thread
from modrelay.threads.errors import NoOpenThread


class ThreadResolver:
    """Maps a staff channel to its open thread. Read-only."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def find_open_thread(self, channel_id: Union[ChannelID, int]) -> Optional[Thread]:
        thread = await self.db.find_open_thread(ChannelID(channel_id))
        # The query filters on closed_by_id already; never hand out a closed row.
        if thread is not None and not thread.is_open:
            return None
        return thread

    async def require_open_thread(self, channel_id: Union[ChannelID, int]) -> Thread:
        """Like :meth:`find_open_thread` but raises :class:`NoOpenThread` instead of returning None."""
        thread = await self.find_open_thread(channel_id)
        if thread is None:
            raise NoOpenThread()
        return thread
