"""Tests for event envelopes and wire frames."""

from __future__ import annotations

import json
import re

import pytest

from neurelay.envelope import (
    CHAT_MESSAGE_TYPE,
    ChatEnvelope,
    LogEnvelope,
    chat_history_frame,
    now_iso,
    welcome_frame,
)

ISO_Z = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


class TestNowIso:
    def test_format(self):
        assert ISO_Z.match(now_iso())


class TestLogEnvelope:
    def test_defaults(self):
        env = LogEnvelope(message="hello")
        assert env.type == "info"
        assert env.category == "log"
        assert ISO_Z.match(env.timestamp)

    def test_wire_order(self):
        env = LogEnvelope(message="m", type="error", timestamp="t")
        assert env.to_json() == '{"message": "m", "type": "error", "timestamp": "t"}'

    def test_immutable(self):
        env = LogEnvelope(message="m")
        with pytest.raises(AttributeError):
            env.message = "x"  # type: ignore[misc]

    def test_missing_message_omitted(self):
        env = LogEnvelope(message=None, timestamp="t")
        assert env.to_dict() == {"type": "info", "timestamp": "t"}


class TestChatEnvelope:
    def test_from_frame_passes_fields_through(self):
        frame = {
            "action": "broadcast_chat",
            "type": "admin_message",
            "id": "42",
            "username": "ada",
            "message": "hi",
            "timestamp": "2020-01-01T00:00:00Z",
            "color": "#fff",
            "messageType": "text",
        }
        env = ChatEnvelope.from_frame(frame)
        assert env.category == "chat"
        assert env.to_dict() == {k: v for k, v in frame.items() if k != "action"}

    def test_timestamp_not_generated(self):
        env = ChatEnvelope.from_frame({"id": "1", "username": "a", "message": "hi"})
        assert env.timestamp is None
        assert "timestamp" not in env.to_dict()

    def test_type_defaults_to_chat_message(self):
        env = ChatEnvelope.from_frame({"id": "1", "username": "a", "message": "hi"})
        assert env.to_dict() == {
            "type": CHAT_MESSAGE_TYPE,
            "id": "1",
            "username": "a",
            "message": "hi",
        }

    def test_wire_order(self):
        env = ChatEnvelope(
            id="1", username="u", message="m", timestamp="t", color="c", messageType="x"
        )
        assert list(json.loads(env.to_json())) == [
            "type", "id", "username", "message", "timestamp", "color", "messageType",
        ]


class TestFrames:
    def test_welcome(self):
        frame = welcome_frame("hello")
        assert frame["message"] == "hello"
        assert frame["type"] == "success"
        assert ISO_Z.match(frame["timestamp"])

    def test_chat_history(self):
        entries = [ChatEnvelope(id=str(i), message=f"m{i}") for i in range(3)]
        frame = chat_history_frame(entries)
        assert frame["action"] == "chat_history"
        assert [m["id"] for m in frame["messages"]] == ["0", "1", "2"]
        assert ISO_Z.match(frame["timestamp"])

    def test_chat_history_empty(self):
        assert chat_history_frame([])["messages"] == []
