"""Framework-neutral data types shared across packages."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ToolCall:
    """One tool selection made by the model."""

    id: str
    name: str
    arguments: str = ""


@dataclass(frozen=True)
class CompletionChoice:
    """Normalized view of one completion choice."""

    finish_reason: str | None
    content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)


@dataclass(frozen=True)
class Completion:
    """Normalized completion response."""

    choices: list[CompletionChoice]
    model: str = ""
