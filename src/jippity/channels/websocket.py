"""WebSocket transport for the game API."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

from loguru import logger
from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from jippity.protocol.codec import encode
from jippity.protocol.messages import ActionMessage


class WebSocketChannel:
    """Accept game clients and fan their frames into one inbound queue.

    Every connection is equal: inbound text from any of them goes to the same
    session, and outbound messages go to all of them.
    """

    name = "websocket"

    def __init__(self, host: str = "127.0.0.1", port: int = 8000) -> None:
        self.host = host
        self.port = port
        self.connections: set[Any] = set()
        self._inbound: asyncio.Queue[str] = asyncio.Queue()
        self._server: Server | None = None
        self._sends: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._server is not None

    async def start(self) -> None:
        self._server = await serve(self.handle_connection, self.host, self.port)
        # port 0 binds an ephemeral port
        self.port = self._server.sockets[0].getsockname()[1]
        logger.info("websocket.start host={} port={}", self.host, self.port)

    async def stop(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        for task in list(self._sends):
            task.cancel()
        for task in list(self._sends):
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.info("websocket.stop")

    async def handle_connection(self, connection: ServerConnection) -> None:
        self.connections.add(connection)
        peer = getattr(connection, "remote_address", None)
        logger.info("websocket.connected peer={} connections={}", peer, len(self.connections))
        try:
            async for frame in connection:
                if not isinstance(frame, str):
                    logger.error("websocket.frame.binary_rejected peer={} size={}", peer, len(frame))
                    continue
                self._inbound.put_nowait(frame)
        except ConnectionClosed as exc:
            logger.info("websocket.closed peer={} code={}", peer, getattr(exc.rcvd, "code", None))
        finally:
            self.connections.discard(connection)
            logger.info("websocket.disconnected peer={} connections={}", peer, len(self.connections))

    async def next_inbound(self, timeout_seconds: float | None = None) -> str | None:
        """Return the next text frame from any client, or ``None`` on timeout."""
        if timeout_seconds is None:
            return await self._inbound.get()
        try:
            return await asyncio.wait_for(self._inbound.get(), timeout_seconds)
        except TimeoutError:
            return None

    def broadcast(self, message: ActionMessage) -> None:
        """Send to every live connection without waiting; failures are only logged."""
        text = encode(message)
        if not self.connections:
            logger.warning("websocket.broadcast.no_connections command={}", message.command)
            return
        for connection in list(self.connections):
            task = asyncio.create_task(self._send(connection, text))
            self._sends.add(task)
            task.add_done_callback(self._sends.discard)
        logger.debug("websocket.broadcast command={} connections={}", message.command, len(self.connections))

    async def flush(self) -> None:
        """Wait for outstanding sends."""
        if self._sends:
            await asyncio.gather(*list(self._sends), return_exceptions=True)

    async def _send(self, connection: Any, text: str) -> None:
        try:
            await connection.send(text)
        except Exception as exc:
            logger.error(
                "websocket.send.error peer={} error={}",
                getattr(connection, "remote_address", None),
                exc,
            )
