"""OpenAI chat-completions adapter for the session."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from loguru import logger
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion, ChatCompletionMessageParam, ChatCompletionToolParam

from jippity.config import Settings
from jippity.core.invocation import ToolChoice
from jippity.errors import ApiKeyNotConfiguredError
from jippity.types import Completion, CompletionChoice, ToolCall


class OpenAICompletionClient:
    """Send the tape and tools to an OpenAI-compatible endpoint."""

    def __init__(self, settings: Settings, *, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings
        self._client = client or self._build_client(settings)

    @property
    def model(self) -> str:
        return self._settings.model

    async def complete(
        self,
        messages: Sequence[ChatCompletionMessageParam],
        *,
        tools: Sequence[ChatCompletionToolParam],
        tool_choice: ToolChoice | None = None,
    ) -> Completion:
        payload: dict[str, Any] = {
            "model": self._settings.model,
            "messages": list(messages),
            "temperature": self._settings.temperature,
            "max_completion_tokens": self._settings.max_tokens,
        }
        if tools:
            payload["tools"] = list(tools)
            if tool_choice is not None:
                payload["tool_choice"] = tool_choice

        logger.debug(
            "openai.request model={} messages={} tools={} tool_choice={}",
            self._settings.model,
            len(payload["messages"]),
            len(tools),
            tool_choice,
        )
        response = await self._client.chat.completions.create(**payload)
        completion = to_completion(response)
        logger.debug(
            "openai.response model={} finish_reasons={}",
            completion.model,
            [choice.finish_reason for choice in completion.choices],
        )
        return completion

    async def aclose(self) -> None:
        await self._client.close()

    def _build_client(self, settings: Settings) -> AsyncOpenAI:
        if not settings.api_key:
            raise ApiKeyNotConfiguredError("Set JIPPITY_API_KEY or OPENAI_API_KEY to reach the completion service")
        return AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.api_base,
            timeout=settings.request_timeout_seconds,
        )


def to_completion(response: ChatCompletion) -> Completion:
    """Reduce an SDK response to the fields the session reads."""
    choices: list[CompletionChoice] = []
    for choice in response.choices:
        tool_calls: list[ToolCall] = []
        for call in choice.message.tool_calls or []:
            function = getattr(call, "function", None)
            if function is None:
                logger.warning("openai.tool_call.unsupported id={} type={}", call.id, getattr(call, "type", None))
                continue
            tool_calls.append(ToolCall(id=call.id, name=function.name, arguments=function.arguments or ""))
        choices.append(
            CompletionChoice(
                finish_reason=choice.finish_reason,
                content=choice.message.content,
                tool_calls=tool_calls,
            )
        )
    return Completion(choices=choices, model=response.model or "")
