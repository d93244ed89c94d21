import asyncio
import json
from typing import Any

import pytest
from websockets.asyncio.client import connect

from jippity.channels.websocket import WebSocketChannel
from jippity.protocol.messages import ActionData, ActionMessage


class FakeConnection:
    def __init__(self, frames: list[Any] | None = None, *, fail_send: bool = False) -> None:
        self.frames = frames or []
        self.sent: list[str] = []
        self.fail_send = fail_send
        self.remote_address = ("127.0.0.1", 50000)

    def __aiter__(self):
        async def _iterator():
            for frame in self.frames:
                yield frame

        return _iterator()

    async def send(self, text: str) -> None:
        if self.fail_send:
            raise ConnectionResetError("peer went away")
        self.sent.append(text)


def _action(call_id: str = "abc") -> ActionMessage:
    return ActionMessage(data=ActionData(id=call_id, name="jump"))


@pytest.mark.asyncio
async def test_text_frames_are_queued_and_binary_rejected() -> None:
    channel = WebSocketChannel()
    connection = FakeConnection(["first", b"\x00\x01", "second"])

    await channel.handle_connection(connection)  # type: ignore[arg-type]

    assert await channel.next_inbound(0.1) == "first"
    assert await channel.next_inbound(0.1) == "second"
    assert channel.connections == set()


@pytest.mark.asyncio
async def test_next_inbound_times_out() -> None:
    channel = WebSocketChannel()
    assert await channel.next_inbound(0.01) is None


@pytest.mark.asyncio
async def test_frames_from_many_connections_share_one_stream() -> None:
    channel = WebSocketChannel()
    await asyncio.gather(
        channel.handle_connection(FakeConnection(["a1", "a2"])),  # type: ignore[arg-type]
        channel.handle_connection(FakeConnection(["b1"])),  # type: ignore[arg-type]
    )

    received = [await channel.next_inbound(0.1) for _ in range(3)]
    assert sorted(received) == ["a1", "a2", "b1"]  # type: ignore[type-var]


@pytest.mark.asyncio
async def test_broadcast_reaches_every_connection_despite_failures() -> None:
    channel = WebSocketChannel()
    healthy = FakeConnection()
    broken = FakeConnection(fail_send=True)
    channel.connections.update({healthy, broken})

    channel.broadcast(_action("abc"))
    await channel.flush()

    assert [json.loads(text) for text in healthy.sent] == [
        {"command": "action", "data": {"id": "abc", "name": "jump"}}
    ]
    assert broken.sent == []


@pytest.mark.asyncio
async def test_broadcast_without_connections_is_a_no_op() -> None:
    channel = WebSocketChannel()
    channel.broadcast(_action())
    await channel.flush()


@pytest.mark.asyncio
async def test_server_round_trip() -> None:
    channel = WebSocketChannel("127.0.0.1", 0)
    await channel.start()
    try:
        async with connect(f"ws://127.0.0.1:{channel.port}") as websocket:
            await websocket.send('{"command": "startup", "game": "Zomboid"}')
            assert await channel.next_inbound(2) == '{"command": "startup", "game": "Zomboid"}'

            channel.broadcast(_action("xyz"))
            reply = await asyncio.wait_for(websocket.recv(), 2)
            assert json.loads(reply)["data"]["id"] == "xyz"
    finally:
        await channel.stop()
    assert not channel.running
