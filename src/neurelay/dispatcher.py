"""Routes inbound client frames by their ``action`` field."""

from __future__ import annotations

import json
import logging
import math
from typing import Any

from neurelay.engine import BroadcastEngine
from neurelay.envelope import ChatEnvelope
from neurelay.sync import SyncHandler
from neurelay.transport import Connection

logger = logging.getLogger(__name__)

ACTION_REQUEST_HISTORY = "request_history"
ACTION_REQUEST_CHAT_HISTORY = "request_chat_history"
ACTION_BROADCAST = "broadcast"
ACTION_BROADCAST_CHAT = "broadcast_chat"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number out of range: {text}")
    return value


def parse_frame(raw: str | bytes) -> dict[str, Any] | None:
    """Decode a frame into a JSON object, or None if it is not one."""
    try:
        frame = json.loads(
            raw, parse_constant=_reject_constant, parse_float=_finite_float
        )
    except (ValueError, RecursionError) as e:
        # Also covers JSONDecodeError, bad UTF-8 and oversized int literals.
        logger.warning("Dropping unparseable frame: %s", e)
        return None
    if not isinstance(frame, dict):
        logger.warning("Dropping frame that is not a JSON object: %r", frame)
        return None
    return frame


class InboundDispatcher:
    """Single-shot classifier: one frame in, at most one action out."""

    def __init__(self, engine: BroadcastEngine, sync: SyncHandler) -> None:
        self._engine = engine
        self._sync = sync

    def dispatch(self, conn: Connection, raw: str | bytes) -> str | None:
        """Handle one inbound frame from ``conn``.

        Returns the action that was taken, or None if the frame was dropped
        or ignored. Never raises for bad input and never closes ``conn``.
        """
        frame = parse_frame(raw)
        if frame is None:
            return None

        action = frame.get("action")
        logger.debug("Received frame from client %s: %r", conn.id, frame)

        if action == ACTION_REQUEST_HISTORY:
            self._sync.replay_log(conn)
        elif action == ACTION_REQUEST_CHAT_HISTORY:
            self._sync.replay_chat(conn)
        elif action == ACTION_BROADCAST:
            self._engine.broadcast_log(frame.get("message"), frame.get("type"))
        elif action == ACTION_BROADCAST_CHAT:
            self._engine.broadcast_chat(ChatEnvelope.from_frame(frame))
        elif frame.get("message"):
            # Older publishers send bare {message, type} frames.
            self._engine.broadcast_log(frame["message"], frame.get("type"))
            return ACTION_BROADCAST
        else:
            logger.debug("Ignoring frame with no action and no message: %r", frame)
            return None
        return action
