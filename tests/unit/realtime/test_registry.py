"""Unit tests for ConnectionRegistry."""

import threading

import pytest

from src.notelink.realtime.registry import ConnectionRegistry


def test_register_and_lookup():
    registry = ConnectionRegistry()
    registry.register("u1", "c1")
    registry.register("u1", "c2")

    assert registry.connections_for("u1") == frozenset({"c1", "c2"})
    assert registry.is_online("u1")
    assert registry.user_for("c1") == "u1"
    assert registry.connection_count() == 2
    assert len(registry) == 1


def test_register_is_idempotent():
    registry = ConnectionRegistry()
    registry.register("u1", "c1")
    registry.register("u1", "c1")

    assert registry.connections_for("u1") == frozenset({"c1"})
    assert registry.connection_count() == 1


def test_offline_user_has_no_connections():
    registry = ConnectionRegistry()
    assert registry.connections_for("nobody") == frozenset()
    assert not registry.is_online("nobody")


def test_deregister_removes_empty_entry():
    registry = ConnectionRegistry()
    registry.register("u1", "c1")

    assert registry.deregister("c1") == "u1"
    assert not registry.is_online("u1")
    assert registry.online_users() == frozenset()
    assert len(registry) == 0


def test_deregister_keeps_other_connections():
    registry = ConnectionRegistry()
    registry.register("u1", "c1")
    registry.register("u1", "c2")

    registry.deregister("c1")
    assert registry.connections_for("u1") == frozenset({"c2"})


def test_deregister_unknown_is_noop():
    registry = ConnectionRegistry()
    assert registry.deregister("missing") is None
    registry.register("u1", "c1")
    registry.deregister("c1")
    assert registry.deregister("c1") is None


def test_register_under_new_user_moves_connection():
    registry = ConnectionRegistry()
    registry.register("u1", "c1")
    registry.register("u2", "c1")

    assert not registry.is_online("u1")
    assert registry.connections_for("u2") == frozenset({"c1"})
    assert registry.user_for("c1") == "u2"


def test_single_stripe_move_does_not_deadlock():
    registry = ConnectionRegistry(stripes=1)
    registry.register("u1", "c1")
    registry.register("u2", "c1")
    assert registry.user_for("c1") == "u2"
    assert registry.deregister("c1") == "u2"


def test_snapshot_is_not_affected_by_later_changes():
    registry = ConnectionRegistry()
    registry.register("u1", "c1")
    snapshot = registry.connections_for("u1")
    registry.register("u1", "c2")
    assert snapshot == frozenset({"c1"})


def test_invalid_stripe_count():
    with pytest.raises(ValueError):
        ConnectionRegistry(stripes=0)


def test_clear():
    registry = ConnectionRegistry()
    registry.register("u1", "c1")
    registry.register("u2", "c2")
    registry.clear()
    assert len(registry) == 0
    assert registry.connection_count() == 0


def test_concurrent_register_and_deregister():
    registry = ConnectionRegistry(stripes=4)
    users = [f"user-{i}" for i in range(5)]
    errors = []

    def worker(worker_id: int):
        try:
            for n in range(300):
                connection = f"w{worker_id}-c{n}"
                registry.register(users[n % len(users)], connection)
                # hop to another user half of the time
                if n % 2:
                    registry.register(users[(n + 1) % len(users)], connection)
                if n % 3 == 0:
                    registry.deregister(connection)
        except Exception as e:  # pragma: no cover - reported below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    expected = {f"w{w}-c{n}" for w in range(8) for n in range(300) if n % 3 != 0}
    seen = set()
    for user in registry.online_users():
        connections = registry.connections_for(user)
        assert connections
        for connection in connections:
            assert registry.user_for(connection) == user
            assert connection not in seen
            seen.add(connection)
    assert seen == expected
    assert registry.connection_count() == len(expected)
