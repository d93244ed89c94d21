"""Conversation turns recorded on the tape."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from openai.types.chat import ChatCompletionMessageParam

from jippity.types import ToolCall


@dataclass(frozen=True)
class SystemTurn:
    role: ClassVar[str] = "system"

    content: str

    def to_message(self) -> ChatCompletionMessageParam:
        return {"role": "system", "content": self.content}


@dataclass(frozen=True)
class UserTurn:
    role: ClassVar[str] = "user"

    content: str

    def to_message(self) -> ChatCompletionMessageParam:
        return {"role": "user", "content": self.content}


@dataclass(frozen=True)
class AssistantTurn:
    """What the model said, and the single tool call that was forwarded to the game."""

    role: ClassVar[str] = "assistant"

    content: str | None = None
    tool_call: ToolCall | None = None

    def to_message(self) -> ChatCompletionMessageParam:
        message: dict[str, object] = {"role": "assistant", "content": self.content}
        if self.tool_call is not None:
            message["tool_calls"] = [
                {
                    "id": self.tool_call.id,
                    "type": "function",
                    "function": {"name": self.tool_call.name, "arguments": self.tool_call.arguments},
                }
            ]
        return message  # type: ignore[return-value]


@dataclass(frozen=True)
class ToolResultTurn:
    role: ClassVar[str] = "tool"

    tool_call_id: str
    content: str

    def to_message(self) -> ChatCompletionMessageParam:
        return {"role": "tool", "tool_call_id": self.tool_call_id, "content": self.content}


type Turn = SystemTurn | UserTurn | AssistantTurn | ToolResultTurn
