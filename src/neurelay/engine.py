"""Broadcast engine: record an envelope in its history, then fan it out."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from neurelay.envelope import DEFAULT_LOG_TYPE, ChatEnvelope, LogEnvelope
from neurelay.history import HistoryBuffer
from neurelay.registry import ConnectionRegistry
from neurelay.transport import Connection

logger = logging.getLogger(__name__)


class BroadcastEngine:
    """Appends envelopes to the per-category history and sends them to everyone.

    Delivery is best effort. A connection that is closed or whose send fails
    is dropped from the registry, exactly as if it had disconnected, and the
    fan-out carries on with the rest.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        log_history: HistoryBuffer[LogEnvelope],
        chat_history: HistoryBuffer[ChatEnvelope],
    ) -> None:
        self._registry = registry
        self._log_history = log_history
        self._chat_history = chat_history
        self._evict_listeners: list[Callable[[Connection], None]] = []

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def log_history(self) -> HistoryBuffer[LogEnvelope]:
        return self._log_history

    @property
    def chat_history(self) -> HistoryBuffer[ChatEnvelope]:
        return self._chat_history

    def broadcast_log(self, message: Any, type: str | None = DEFAULT_LOG_TYPE) -> LogEnvelope:
        """Stamp, record and fan out a log line.

        Raises:
            ValueError: the message cannot be encoded as standard JSON.
                Nothing is recorded or sent in that case.
        """
        envelope = LogEnvelope(message=message, type=type or DEFAULT_LOG_TYPE)
        data = envelope.to_json()
        self._log_history.append(envelope)
        delivered = self._fan_out(data)
        logger.info("Broadcasted log to %d client(s): %s", delivered, message)
        return envelope

    def broadcast_chat(self, envelope: ChatEnvelope) -> ChatEnvelope:
        """Record and fan out a chat entry, keeping its own timestamp.

        Raises:
            ValueError: same as :meth:`broadcast_log`.
        """
        data = envelope.to_json()
        self._chat_history.append(envelope)
        delivered = self._fan_out(data)
        logger.info(
            "Broadcasted chat from %s to %d client(s)", envelope.username, delivered
        )
        return envelope

    def add_evict_listener(self, listener: Callable[[Connection], None]) -> None:
        """Call ``listener(conn)`` whenever a connection is dropped for being unreachable."""
        self._evict_listeners.append(listener)

    def deliver(self, conn: Connection, data: str) -> bool:
        """Send one serialized frame to one connection.

        Returns False (and evicts the connection) if it is no longer reachable.
        """
        if not conn.is_open:
            self._evict(conn, "closed")
            return False
        try:
            conn.send(data)
        except Exception:
            logger.debug("Send to %r failed", conn, exc_info=True)
            self._evict(conn, "send failed")
            return False
        return True

    def _fan_out(self, data: str) -> int:
        # Serialized once by the caller; every client gets the identical frame.
        delivered = 0
        for conn in self._registry.snapshot():
            if self.deliver(conn, data):
                delivered += 1
        return delivered

    def _evict(self, conn: Connection, reason: str) -> None:
        if self._registry.remove(conn):
            logger.info("Dropped client %s (%s)", conn.id, reason)
            for listener in self._evict_listeners:
                listener(conn)
