"""Shared test fixtures."""

from __future__ import annotations

import json

import pytest

from neurelay.relay import Relay
from neurelay.transport import Connection, ConnectionSendError


class FakeConnection(Connection):
    """In-memory connection that records every frame it is sent."""

    def __init__(self, fail: bool = False) -> None:
        super().__init__()
        self.sent: list[str] = []
        self.fail = fail
        self.open = True
        self.close_calls = 0

    @property
    def is_open(self) -> bool:
        return self.open

    def send(self, data: str) -> None:
        if self.fail:
            raise ConnectionSendError("boom")
        self.sent.append(data)

    async def close(self) -> None:
        self.open = False
        self.close_calls += 1

    @property
    def frames(self) -> list[dict]:
        return [json.loads(s) for s in self.sent]


@pytest.fixture
def relay() -> Relay:
    """Provide a fresh Relay that replays history without delay."""
    return Relay(replay_delay=0)


@pytest.fixture
def make_conn():
    """Factory for fake connections."""
    return FakeConnection
