"""Broadcastable event envelopes (log and chat) and their wire format."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

Category = Literal["log", "chat"]

DEFAULT_LOG_TYPE = "info"
CHAT_MESSAGE_TYPE = "chat_message"

# Frame fields copied verbatim from a chat publisher, in wire order.
CHAT_FIELDS = ("type", "id", "username", "message", "timestamp", "color", "messageType")


def now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop absent fields so they never show up as ``null`` on the wire."""
    return {k: v for k, v in data.items() if v is not None}


def encode(data: dict[str, Any]) -> str:
    """Serialize a frame for sending."""
    return json.dumps(data, ensure_ascii=False, allow_nan=False)


@dataclass(frozen=True)
class LogEnvelope:
    """A terminal log line. The relay stamps it at broadcast time."""

    message: Any
    type: str = DEFAULT_LOG_TYPE
    timestamp: str = field(default_factory=now_iso)

    category: Category = field(default="log", init=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {"message": self.message, "type": self.type, "timestamp": self.timestamp}
        )

    def to_json(self) -> str:
        return encode(self.to_dict())


@dataclass(frozen=True)
class ChatEnvelope:
    """A chat entry.

    All fields are opaque and passed through as the publisher sent them,
    including ``timestamp``: chat entries keep the client clock.
    """

    id: Any = None
    username: Any = None
    message: Any = None
    timestamp: Any = None
    color: Any = None
    messageType: Any = None
    type: Any = CHAT_MESSAGE_TYPE

    category: Category = field(default="chat", init=False, repr=False)

    @classmethod
    def from_frame(cls, frame: dict[str, Any]) -> ChatEnvelope:
        """Build a chat envelope from an inbound frame's chat fields."""
        values = {name: frame.get(name) for name in CHAT_FIELDS}
        if values["type"] is None:
            values["type"] = CHAT_MESSAGE_TYPE
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return _compact({name: getattr(self, name) for name in CHAT_FIELDS})

    def to_json(self) -> str:
        return encode(self.to_dict())


def welcome_frame(message: str) -> dict[str, Any]:
    """Frame sent to every client right after the handshake."""
    return {"message": message, "type": "success", "timestamp": now_iso()}


def chat_history_frame(entries: list[ChatEnvelope]) -> dict[str, Any]:
    """Single batch frame carrying the whole chat backlog."""
    return {
        "action": "chat_history",
        "messages": [entry.to_dict() for entry in entries],
        "timestamp": now_iso(),
    }
