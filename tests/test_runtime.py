import asyncio
from dataclasses import dataclass, field
from typing import Any

import pytest

from jippity.app.runtime import AppRuntime
from jippity.config import Settings
from jippity.protocol.messages import ActionMessage
from jippity.types import Completion, CompletionChoice

STARTUP = '{"command": "startup", "game": "Zomboid"}'
GO = '{"command": "context", "game": "Zomboid", "data": {"message": "go", "silent": false}}'


@dataclass
class FakeChannel:
    """Plays back frames, then blocks like a quiet game."""

    frames: list[str]
    sent: list[ActionMessage] = field(default_factory=list)
    started: bool = False
    stopped: bool = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def next_inbound(self, timeout_seconds: float | None = None) -> str | None:
        await asyncio.sleep(0)
        if not self.frames:
            await asyncio.Future()
        return self.frames.pop(0)

    def broadcast(self, message: ActionMessage) -> None:
        self.sent.append(message)


@dataclass
class ScriptedClient:
    script: list[Completion | Exception]
    calls: list[list[Any]] = field(default_factory=list)
    closed: bool = False

    async def complete(self, messages, *, tools, tool_choice=None) -> Completion:
        self.calls.append(list(messages))
        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return step

    async def aclose(self) -> None:
        self.closed = True


def _spoke(text: str) -> Completion:
    return Completion(choices=[CompletionChoice(finish_reason="stop", content=text)])


def _settings(**overrides: Any) -> Settings:
    overrides.setdefault("think_interval_seconds", 1)
    return Settings(_env_file=None, api_key="sk-test", **overrides)


@pytest.mark.asyncio
async def test_quiet_game_nudges_the_model() -> None:
    channel = FakeChannel([STARTUP])
    client = ScriptedClient([_spoke("hello"), ConnectionError("boom")])
    runtime = AppRuntime(_settings(), client=client, channel=channel)  # type: ignore[arg-type]

    reason = await asyncio.wait_for(runtime.run(), 5)

    assert "boom" in reason
    assert len(client.calls) == 2
    assert channel.started
    assert channel.stopped
    assert client.closed


@pytest.mark.asyncio
async def test_no_nudges_when_proactive_disabled() -> None:
    channel = FakeChannel([STARTUP, GO])
    client = ScriptedClient([_spoke("hello"), ConnectionError("boom")])
    runtime = AppRuntime(_settings(proactive=False), client=client, channel=channel)  # type: ignore[arg-type]

    reason = await asyncio.wait_for(runtime.run_loop(), 5)

    assert "boom" in reason
    assert len(client.calls) == 2
    assert client.calls[-1][-1] == {"role": "user", "content": "go"}


@pytest.mark.asyncio
async def test_loop_returns_when_session_exits_while_game_is_quiet() -> None:
    channel = FakeChannel([STARTUP, GO])
    client = ScriptedClient([_spoke("hello"), ConnectionError("boom")])
    runtime = AppRuntime(_settings(think_interval_seconds=60), client=client, channel=channel)  # type: ignore[arg-type]

    reason = await asyncio.wait_for(runtime.run_loop(), 2)

    assert "boom" in reason
    assert runtime.handler.exiting
    assert channel.frames == []


@pytest.mark.asyncio
async def test_system_prompt_override() -> None:
    channel = FakeChannel([])
    client = ScriptedClient([])
    runtime = AppRuntime(_settings(system_prompt="Play well"), client=client, channel=channel)  # type: ignore[arg-type]
    assert runtime.handler.tape.messages() == [{"role": "system", "content": "Play well"}]
