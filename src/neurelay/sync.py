"""Replays history to a single client, immediately or after a delay."""

from __future__ import annotations

import asyncio
import logging

from neurelay.engine import BroadcastEngine
from neurelay.envelope import chat_history_frame, encode
from neurelay.history import HistoryBuffer
from neurelay.transport import Connection

logger = logging.getLogger(__name__)

# Lets the welcome frame reach a new client before its backlog does.
DEFAULT_REPLAY_DELAY = 0.1


class SyncHandler:
    """Catches a client up on recent activity.

    Every replay works from one ``snapshot()`` of the buffer taken when it
    starts, so broadcasts landing meanwhile never disturb it. Only the target
    connection is written to.
    """

    def __init__(
        self,
        engine: BroadcastEngine,
        replay_delay: float = DEFAULT_REPLAY_DELAY,
    ) -> None:
        self._engine = engine
        self._replay_delay = replay_delay
        self._pending: dict[int, asyncio.Task] = {}
        engine.add_evict_listener(self.cancel)

    def replay(self, buffer: HistoryBuffer, conn: Connection) -> int:
        """Send each envelope of ``buffer`` to ``conn`` as its own frame.

        Returns how many frames were sent; stops early if the connection
        goes away.
        """
        entries = buffer.snapshot()
        sent = 0
        for envelope in entries:
            if not self._engine.deliver(conn, envelope.to_json()):
                break
            sent += 1
        logger.info("Sent %d/%d historical entries to client %s", sent, len(entries), conn.id)
        return sent

    def replay_log(self, conn: Connection) -> int:
        return self.replay(self._engine.log_history, conn)

    def replay_chat(self, conn: Connection) -> bool:
        """Send the whole chat backlog to ``conn`` as one batch frame."""
        entries = self._engine.chat_history.snapshot()
        ok = self._engine.deliver(conn, encode(chat_history_frame(entries)))
        if ok:
            logger.info("Sent chat history (%d entries) to client %s", len(entries), conn.id)
        return ok

    # -- deferred replay on connect --

    def schedule_replay(self, conn: Connection) -> asyncio.Task:
        """Replay the log backlog to ``conn`` after the configured delay."""
        self.cancel(conn)
        task = asyncio.create_task(
            self._delayed_replay(conn), name=f"replay-{conn.id}"
        )
        self._pending[conn.id] = task
        task.add_done_callback(lambda t, cid=conn.id: self._forget(cid, t))
        return task

    def cancel(self, conn: Connection) -> None:
        """Drop a pending deferred replay for ``conn``, if any."""
        task = self._pending.pop(conn.id, None)
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def cancel_all(self) -> None:
        for task in list(self._pending.values()):
            task.cancel()
        self._pending.clear()

    @property
    def pending(self) -> int:
        """Number of deferred replays not yet fired."""
        return len(self._pending)

    async def _delayed_replay(self, conn: Connection) -> None:
        await asyncio.sleep(self._replay_delay)
        if conn not in self._engine.registry or not conn.is_open:
            logger.debug("Client %s gone before history replay", conn.id)
            return
        self.replay_log(conn)

    def _forget(self, conn_id: int, task: asyncio.Task) -> None:
        if self._pending.get(conn_id) is task:
            del self._pending[conn_id]
