"""Outbound message seam between the conversation manager and a chat transport."""
from collections import defaultdict
from typing import Dict, List, Protocol


class MessageSink(Protocol):
    """What the conversation manager needs from a chat transport."""

    async def send_message(self, session_id: str, text: str) -> None:
        ...

    async def notify_typing(self, session_id: str) -> None:
        ...


class CollectingSink:
    """Buffers outbound messages per session so a request/response transport can return them."""

    def __init__(self) -> None:
        self.messages: Dict[str, List[str]] = defaultdict(list)
        self.typing: Dict[str, int] = defaultdict(int)

    async def send_message(self, session_id: str, text: str) -> None:
        self.messages[session_id].append(text)

    async def notify_typing(self, session_id: str) -> None:
        self.typing[session_id] += 1

    def drain(self, session_id: str) -> List[str]:
        """Return and forget the messages collected for a session."""
        return self.messages.pop(session_id, [])
