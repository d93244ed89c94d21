"""Transport channels."""

from jippity.channels.websocket import WebSocketChannel

__all__ = ["WebSocketChannel"]
