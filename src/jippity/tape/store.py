"""Tape storage backends."""

from __future__ import annotations

from typing import Protocol

from jippity.tape.turns import Turn


class TapeStore(Protocol):
    """Append-only storage for conversation turns.

    The handler only appends and reads the full sequence; an eviction or
    summarization policy can be added by another store without touching it.
    """

    def append(self, turn: Turn) -> None: ...

    def read(self) -> list[Turn]: ...

    def __len__(self) -> int: ...


class InMemoryTapeStore:
    """Tape kept in process memory for the lifetime of the server."""

    def __init__(self) -> None:
        self._turns: list[Turn] = []

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    def read(self) -> list[Turn]:
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)
