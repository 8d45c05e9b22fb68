"""Tests for the connection registry."""

from __future__ import annotations

from neurelay.registry import ConnectionRegistry


class TestConnectionRegistry:
    def test_add_and_contains(self, make_conn):
        reg = ConnectionRegistry()
        a = make_conn()
        reg.add(a)
        assert a in reg
        assert len(reg) == 1

    def test_add_is_idempotent(self, make_conn):
        reg = ConnectionRegistry()
        a = make_conn()
        reg.add(a)
        reg.add(a)
        assert len(reg) == 1

    def test_remove(self, make_conn):
        reg = ConnectionRegistry()
        a = make_conn()
        reg.add(a)
        assert reg.remove(a) is True
        assert a not in reg

    def test_remove_absent_is_noop(self, make_conn):
        reg = ConnectionRegistry()
        assert reg.remove(make_conn()) is False

    def test_ids_are_unique(self, make_conn):
        conns = [make_conn() for _ in range(5)]
        assert len({c.id for c in conns}) == 5

    def test_for_each_visits_each_once(self, make_conn):
        reg = ConnectionRegistry()
        conns = [make_conn() for _ in range(4)]
        for c in conns:
            reg.add(c)
        seen = []
        reg.for_each(seen.append)
        assert sorted(c.id for c in seen) == sorted(c.id for c in conns)

    def test_removal_during_iteration(self, make_conn):
        reg = ConnectionRegistry()
        conns = [make_conn() for _ in range(4)]
        for c in conns:
            reg.add(c)
        seen = []

        def visit(conn):
            seen.append(conn)
            # Drop the visited one and one not yet visited.
            reg.remove(conn)
            reg.remove(conns[-1])

        reg.for_each(visit)
        assert len(seen) == len(set(seen))
        assert len(reg) == 0
