"""One completion request and the interpretation of its result."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

from loguru import logger
from openai.types.chat import ChatCompletionMessageParam, ChatCompletionToolParam

from jippity.core.actions import ActionRegistry
from jippity.core.state import ForcedActionContext
from jippity.errors import InvocationFailure
from jippity.protocol.messages import ActionData, ActionMessage
from jippity.tape.service import TapeService
from jippity.types import Completion, ToolCall

ToolChoice = Literal["auto", "required"]


class CompletionClient(Protocol):
    """Completion-service contract consumed by the session."""

    async def complete(
        self,
        messages: Sequence[ChatCompletionMessageParam],
        *,
        tools: Sequence[ChatCompletionToolParam],
        tool_choice: ToolChoice | None = None,
    ) -> Completion: ...


@dataclass(frozen=True)
class Spoke:
    """The model answered in plain text."""

    text: str


@dataclass(frozen=True)
class ActionSelected:
    """The model chose a tool; ``action`` is what goes to the game."""

    tool_call: ToolCall
    action: ActionMessage
    text: str | None = None
    discarded_calls: int = 0


type InvocationOutcome = Spoke | ActionSelected


class CompletionInvoker:
    """Build the request from the tape and registry, then interpret the answer."""

    def __init__(self, client: CompletionClient) -> None:
        self._client = client

    async def invoke(
        self,
        tape: TapeService,
        actions: ActionRegistry,
        forced: ForcedActionContext | None = None,
    ) -> InvocationOutcome:
        tools = actions.model_tools(forced.action_names if forced is not None else None)
        tool_choice: ToolChoice | None = "required" if forced is not None and tools else None
        logger.info(
            "invocation.start turns={} tools={} forced={}",
            len(tape),
            [tool["function"]["name"] for tool in tools],
            forced is not None,
        )
        completion = await self._client.complete(tape.messages(), tools=tools, tool_choice=tool_choice)
        return interpret_completion(completion)


def interpret_completion(completion: Completion) -> InvocationOutcome:
    """Map a completion to an outcome.

    Raises:
        InvocationFailure: the completion breaks an expectation the session relies on.
    """
    if len(completion.choices) != 1:
        raise InvocationFailure(f"expected exactly one choice, got {len(completion.choices)}")
    choice = completion.choices[0]

    if choice.finish_reason == "stop":
        if not choice.content:
            raise InvocationFailure("finish_reason=stop without text content")
        return Spoke(choice.content)

    if choice.finish_reason == "tool_calls":
        if not choice.tool_calls:
            raise InvocationFailure("finish_reason=tool_calls without any tool call")
        discarded = len(choice.tool_calls) - 1
        if discarded:
            logger.warning(
                "invocation.tool_calls.multiple count={} kept={}",
                len(choice.tool_calls),
                choice.tool_calls[0].name,
            )
        tool_call = choice.tool_calls[0]
        action = ActionMessage(
            data=ActionData(id=tool_call.id, name=tool_call.name, data=tool_call.arguments or None),
        )
        return ActionSelected(
            tool_call=tool_call,
            action=action,
            text=choice.content or None,
            discarded_calls=discarded,
        )

    raise InvocationFailure(f"unexpected finish_reason={choice.finish_reason}")
