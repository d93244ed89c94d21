"""Application runtime: wires the transport, the session and the model client."""

from __future__ import annotations

import asyncio
import contextlib

from loguru import logger

from jippity.channels.websocket import WebSocketChannel
from jippity.config import Settings
from jippity.core.handler import SessionHandler
from jippity.core.invocation import CompletionClient
from jippity.core.prompt import DEFAULT_SYSTEM_PROMPT
from jippity.integrations.openai_client import OpenAICompletionClient


class AppRuntime:
    """Own one session and feed it from the channel until it exits."""

    def __init__(
        self,
        settings: Settings,
        *,
        client: CompletionClient | None = None,
        channel: WebSocketChannel | None = None,
    ) -> None:
        self.settings = settings
        self.channel = channel or WebSocketChannel(settings.host, settings.port)
        self.client = client or OpenAICompletionClient(settings)
        self.handler = SessionHandler(
            self.client,
            self.channel,
            system_prompt=settings.system_prompt or DEFAULT_SYSTEM_PROMPT,
            retry_failed_forced_actions=settings.retry_failed_forced_actions,
        )

    async def run(self) -> str:
        """Serve until the session exits and return the exit reason."""
        await self.channel.start()
        try:
            return await self.run_loop()
        finally:
            self.handler.stop("runtime stopped")
            await self.channel.stop()
            await self._close_client()

    async def run_loop(self) -> str:
        """Feed inbound frames to the session and nudge it every interval.

        Returns as soon as the session exits, even while no frame is arriving.
        """
        interval = self.settings.think_interval_seconds
        logger.info(
            "runtime.start model={} think_interval={}s proactive={}",
            self.settings.model,
            interval,
            self.settings.proactive,
        )
        loop = asyncio.get_running_loop()
        exited = asyncio.create_task(self.handler.wait_exited())
        inbound: asyncio.Task[str | None] | None = None
        next_nudge = loop.time() + interval
        try:
            while not self.handler.exiting:
                if inbound is None:
                    inbound = asyncio.create_task(self.channel.next_inbound())
                await asyncio.wait(
                    {inbound, exited},
                    timeout=max(0.0, next_nudge - loop.time()),
                    return_when=asyncio.FIRST_COMPLETED,
                )
                if inbound.done():
                    raw = inbound.result()
                    inbound = None
                    if raw is not None:
                        self.handler.receive(raw)
                if loop.time() >= next_nudge:
                    next_nudge = loop.time() + interval
                    if self.settings.proactive:
                        self.handler.nudge()
            reason = await exited
        finally:
            for task in (inbound, exited):
                if task is not None and not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task

        logger.info("runtime.exit reason={}", reason)
        return reason

    async def _close_client(self) -> None:
        close = getattr(self.client, "aclose", None)
        if close is None:
            return
        try:
            await close()
        except Exception:
            logger.exception("runtime.client.close_error")
