"""Live set of client connections."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from neurelay.transport import Connection


class ConnectionRegistry:
    """Connections keyed by their stable id.

    Add and remove are O(1) and idempotent. Iteration always walks a
    point-in-time snapshot, so visitors may remove connections (including
    the one being visited) without skipping or repeating anyone.
    """

    def __init__(self) -> None:
        self._connections: dict[int, Connection] = {}

    def add(self, conn: Connection) -> None:
        """Register a connection (no-op if already present)."""
        self._connections[conn.id] = conn

    def remove(self, conn: Connection) -> bool:
        """Unregister a connection.

        Returns True if it was registered, False if it was already gone.
        """
        return self._connections.pop(conn.id, None) is not None

    def snapshot(self) -> list[Connection]:
        """Currently registered connections, copied."""
        return list(self._connections.values())

    def for_each(self, visit: Callable[[Connection], None]) -> None:
        """Call ``visit`` once for every connection registered right now."""
        for conn in self.snapshot():
            visit(conn)

    def __contains__(self, conn: object) -> bool:
        return isinstance(conn, Connection) and self._connections.get(conn.id) is conn

    def __len__(self) -> int:
        return len(self._connections)

    def __iter__(self) -> Iterator[Connection]:
        return iter(self.snapshot())
