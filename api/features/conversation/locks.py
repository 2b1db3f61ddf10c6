"""Per-conversation locks shared by turn handling and deletes."""
import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator


class ConversationLocks:
    """Per-conversation locks serializing work on one conversation inside one process."""

    def __init__(self) -> None:
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def get(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, conversation_id: str) -> AsyncIterator[None]:
        async with self.get(conversation_id):
            yield
