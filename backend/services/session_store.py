"""In-memory conversation contexts keyed by session id."""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from models.conversation import ConversationContext

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Keyed store of ConversationContext records.

    Turns for one session run under that session's ``asyncio.Lock``, which
    makes the read-modify-write a critical section without blocking other
    sessions. A lock only exists while some turn holds or waits for it.
    Contexts are not persisted across restarts.
    """

    def __init__(self) -> None:
        self._contexts: Dict[str, ConversationContext] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def locked(self, session_id: str) -> AsyncIterator[None]:
        """Hold the session's lock for the duration of the block."""
        lock = self._locks.setdefault(session_id, asyncio.Lock())
        self._lock_users[session_id] = self._lock_users.get(session_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[session_id] -= 1
            if not self._lock_users[session_id]:
                del self._lock_users[session_id]
                del self._locks[session_id]

    def get(self, session_id: str) -> Optional[ConversationContext]:
        """Return a working copy of the session's context, or None."""
        context = self._contexts.get(session_id)
        return context.copy() if context else None

    def set(self, session_id: str, context: ConversationContext) -> None:
        self._contexts[session_id] = context.copy()

    def delete(self, session_id: str) -> None:
        if self._contexts.pop(session_id, None) is not None:
            logger.debug(f"Cleared conversation context for {session_id}", extra={"session_id": session_id})

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)
