"""Tape helpers for Jippity."""

from .service import TapeInfo, TapeService
from .store import InMemoryTapeStore, TapeStore
from .turns import AssistantTurn, SystemTurn, ToolResultTurn, Turn, UserTurn

__all__ = [
    "AssistantTurn",
    "InMemoryTapeStore",
    "SystemTurn",
    "TapeInfo",
    "TapeService",
    "TapeStore",
    "ToolResultTurn",
    "Turn",
    "UserTurn",
]
