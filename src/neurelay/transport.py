"""Transport-agnostic connection abstraction.

The relay core only needs three things from a transport: a liveness check,
a non-blocking send and a close. Each transport (the FastAPI WebSocket
endpoint, test fakes) provides a concrete subclass of :class:`Connection`.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod

from starlette.websockets import WebSocket, WebSocketState

logger = logging.getLogger(__name__)

# Outbound frames buffered per client before it counts as unreachable.
OUTBOUND_QUEUE_SIZE = 256

_ids = itertools.count(1)


class ConnectionSendError(RuntimeError):
    """A frame could not be handed to a connection."""


class Connection(ABC):
    """Opaque handle to one bidirectional client channel."""

    def __init__(self) -> None:
        self._id = next(_ids)

    @property
    def id(self) -> int:
        """Stable per-process identifier, used as the registry key."""
        return self._id

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True while frames can still be sent."""

    @abstractmethod
    def send(self, data: str) -> None:
        """Queue a text frame without blocking.

        Raises:
            ConnectionSendError: the frame cannot be delivered.
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying channel. Safe to call more than once."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self._id}>"


class WebSocketConnection(Connection):
    """Starlette WebSocket behind a bounded outbound queue.

    ``send`` only enqueues; a writer task started with :meth:`start` drains
    the queue onto the socket. A full queue (slow consumer) or a failed write
    marks the connection closed.
    """

    def __init__(
        self, ws: WebSocket, queue_size: int = OUTBOUND_QUEUE_SIZE
    ) -> None:
        super().__init__()
        self._ws = ws
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._writer: asyncio.Task | None = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self._ws.client_state == WebSocketState.CONNECTED
            and self._ws.application_state == WebSocketState.CONNECTED
        )

    def start(self) -> None:
        """Start the writer task."""
        if self._writer is None:
            self._writer = asyncio.create_task(
                self._drain(), name=f"ws-writer-{self.id}"
            )

    def send(self, data: str) -> None:
        if not self.is_open:
            raise ConnectionSendError(f"connection {self.id} is closed")
        try:
            self._queue.put_nowait(data)
        except asyncio.QueueFull:
            self._closed = True
            raise ConnectionSendError(
                f"connection {self.id} outbound queue is full"
            ) from None

    async def _drain(self) -> None:
        try:
            while True:
                data = await self._queue.get()
                await self._ws.send_text(data)
        except Exception:
            self._closed = True
            logger.debug("WebSocket write failed on %r", self, exc_info=True)

    async def close(self) -> None:
        self._closed = True
        if self._writer is not None:
            self._writer.cancel()
            self._writer = None
        if self._ws.application_state == WebSocketState.CONNECTED:
            try:
                await self._ws.close()
            except Exception:
                logger.debug("Error closing %r", self, exc_info=True)
