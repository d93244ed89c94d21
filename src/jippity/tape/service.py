"""High-level tape service."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass

from loguru import logger
from openai.types.chat import ChatCompletionMessageParam

from jippity.tape.store import InMemoryTapeStore, TapeStore
from jippity.tape.turns import AssistantTurn, SystemTurn, ToolResultTurn, Turn, UserTurn
from jippity.types import ToolCall


@dataclass(frozen=True)
class TapeInfo:
    """Runtime tape info summary."""

    entries: int
    system: int
    user: int
    assistant: int
    tool: int


class TapeService:
    """Conversation log sent to the completion service on every invocation."""

    def __init__(self, system_prompt: str, *, store: TapeStore | None = None) -> None:
        self._store: TapeStore = store if store is not None else InMemoryTapeStore()
        if system_prompt.strip():
            self._append(SystemTurn(system_prompt))

    def record_user_message(self, content: str) -> UserTurn:
        return self._append(UserTurn(content))

    def record_assistant_message(self, content: str | None, tool_call: ToolCall | None = None) -> AssistantTurn:
        return self._append(AssistantTurn(content=content, tool_call=tool_call))

    def record_action_result(self, tool_call_id: str, *, success: bool, message: str | None = None) -> ToolResultTurn:
        result: dict[str, object] = {"success": success}
        if message:
            result["message"] = message
        return self._append(ToolResultTurn(tool_call_id, json.dumps(result, ensure_ascii=False)))

    def turns(self) -> list[Turn]:
        return self._store.read()

    def messages(self) -> list[ChatCompletionMessageParam]:
        return [turn.to_message() for turn in self._store.read()]

    def info(self) -> TapeInfo:
        roles = Counter(turn.role for turn in self._store.read())
        return TapeInfo(
            entries=len(self._store),
            system=roles["system"],
            user=roles["user"],
            assistant=roles["assistant"],
            tool=roles["tool"],
        )

    def __len__(self) -> int:
        return len(self._store)

    def _append[T: Turn](self, turn: T) -> T:
        self._store.append(turn)
        logger.debug("tape.append role={} entries={}", turn.role, len(self._store))
        return turn
