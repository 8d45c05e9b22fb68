"""The relay: explicitly owned shared state plus the connection lifecycle."""

from __future__ import annotations

import logging
from typing import Any

from neurelay.dispatcher import InboundDispatcher
from neurelay.engine import BroadcastEngine
from neurelay.envelope import (
    ChatEnvelope,
    LogEnvelope,
    encode,
    now_iso,
    welcome_frame,
)
from neurelay.history import DEFAULT_CAPACITY, HistoryBuffer
from neurelay.registry import ConnectionRegistry
from neurelay.sync import DEFAULT_REPLAY_DELAY, SyncHandler
from neurelay.transport import Connection

logger = logging.getLogger(__name__)

DEFAULT_WELCOME_MESSAGE = "Connected to Neural Terminal"


class Relay:
    """Owns the registry and both history buffers for the process lifetime.

    Built once at startup and handed to whatever transport accepts clients;
    the transport calls :meth:`connect`, :meth:`handle_frame` and
    :meth:`disconnect`.
    """

    def __init__(
        self,
        history_size: int = DEFAULT_CAPACITY,
        replay_delay: float = DEFAULT_REPLAY_DELAY,
        welcome_message: str = DEFAULT_WELCOME_MESSAGE,
    ) -> None:
        self.registry = ConnectionRegistry()
        self.log_history: HistoryBuffer[LogEnvelope] = HistoryBuffer(history_size)
        self.chat_history: HistoryBuffer[ChatEnvelope] = HistoryBuffer(history_size)
        self.engine = BroadcastEngine(self.registry, self.log_history, self.chat_history)
        self.sync = SyncHandler(self.engine, replay_delay=replay_delay)
        self.dispatcher = InboundDispatcher(self.engine, self.sync)
        self._welcome_message = welcome_message

    # -- connection lifecycle --

    def connect(self, conn: Connection) -> None:
        """Register a freshly handshaken connection and greet it.

        The log backlog follows shortly after the welcome frame.
        Must be called from within the running event loop.
        """
        self.registry.add(conn)
        logger.info("Client %s connected (%d total)", conn.id, len(self.registry))
        if self.engine.deliver(conn, encode(welcome_frame(self._welcome_message))):
            self.sync.schedule_replay(conn)

    def disconnect(self, conn: Connection) -> None:
        """Forget a connection. Calling it twice is harmless."""
        self.sync.cancel(conn)
        if self.registry.remove(conn):
            logger.info("Client %s disconnected (%d left)", conn.id, len(self.registry))

    def handle_frame(self, conn: Connection, raw: str | bytes) -> str | None:
        return self.dispatcher.dispatch(conn, raw)

    # -- publishing API --

    def broadcast_log(self, message: Any, type: str | None = None) -> LogEnvelope:
        return self.engine.broadcast_log(message, type)

    def broadcast_chat(self, envelope: ChatEnvelope) -> ChatEnvelope:
        return self.engine.broadcast_chat(envelope)

    # -- introspection --

    def status(self) -> dict[str, Any]:
        """Counts for health checks and the status page."""
        return {
            "status": "healthy",
            "clients": len(self.registry),
            "logHistory": len(self.log_history),
            "chatHistory": len(self.chat_history),
            "timestamp": now_iso(),
        }

    async def shutdown(self) -> None:
        """Cancel pending replays and close every client."""
        self.sync.cancel_all()
        conns = self.registry.snapshot()
        for conn in conns:
            self.registry.remove(conn)
            await conn.close()
        logger.info("Relay shut down, closed %d connection(s)", len(conns))
