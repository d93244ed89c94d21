"""FIFO buffer for messages that cannot be handled yet."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from jippity.protocol.messages import Message


class MessageQueue:
    """Messages received while the session is busy, in arrival order."""

    def __init__(self) -> None:
        self._items: deque[Message] = deque()

    def offer(self, message: Message) -> None:
        """Add a message to the end of the queue."""
        self._items.append(message)

    def poll(self) -> Message | None:
        """Remove and return the first message, or ``None`` when empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def peek(self) -> Message | None:
        if not self._items:
            return None
        return self._items[0]

    def clear(self) -> int:
        """Drop every queued message and return how many were dropped."""
        dropped = len(self._items)
        self._items.clear()
        return dropped

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._items))
