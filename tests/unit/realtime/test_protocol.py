"""Unit tests for the presence protocol."""

import uuid

import pytest

from src.notelink.realtime.exceptions import ConnectionClosedError, InvalidIdentityClaim
from src.notelink.realtime.protocol import ConnectionState, PresenceProtocol, normalize_identity
from src.notelink.realtime.registry import ConnectionRegistry


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def protocol(registry):
    return PresenceProtocol(registry)


def test_connect_starts_unregistered(protocol, registry):
    handle = protocol.connect("c1")
    assert handle.state is ConnectionState.UNREGISTERED
    assert handle.user is None
    assert registry.connection_count() == 0


def test_identify_registers(protocol, registry):
    protocol.connect("c1")
    handle = protocol.identify("c1", "u1")

    assert handle.state is ConnectionState.REGISTERED
    assert registry.connections_for("u1") == frozenset({"c1"})


@pytest.mark.parametrize(
    "claim,expected",
    [
        ("  u1 ", "u1"),
        ({"userId": "u1"}, "u1"),
        ({"user_id": "u1"}, "u1"),
    ],
)
def test_normalize_identity(claim, expected):
    assert normalize_identity(claim) == expected


def test_normalize_uuid():
    user_id = uuid.uuid4()
    assert normalize_identity(user_id) == str(user_id)


@pytest.mark.parametrize("claim", ["", "   ", None, 42, {}, {"userId": ""}, ["u1"]])
def test_malformed_claim_leaves_state_unchanged(protocol, registry, claim):
    handle = protocol.connect("c1")
    with pytest.raises(InvalidIdentityClaim):
        protocol.identify("c1", claim)
    assert handle.state is ConnectionState.UNREGISTERED
    assert registry.connection_count() == 0


def test_malformed_claim_keeps_existing_registration(protocol, registry):
    protocol.connect("c1")
    protocol.identify("c1", "u1")
    with pytest.raises(InvalidIdentityClaim):
        protocol.identify("c1", "")
    assert registry.user_for("c1") == "u1"


def test_same_claim_twice_is_noop(protocol, registry):
    protocol.connect("c1")
    protocol.identify("c1", "u1")
    protocol.identify("c1", "u1")
    assert registry.connections_for("u1") == frozenset({"c1"})


def test_new_identity_replaces_old(protocol, registry):
    protocol.connect("c1")
    protocol.identify("c1", "u1")
    handle = protocol.identify("c1", "u2")

    assert handle.user == "u2"
    assert not registry.is_online("u1")
    assert registry.connections_for("u2") == frozenset({"c1"})


def test_disconnect_deregisters(protocol, registry):
    protocol.connect("c1")
    protocol.identify("c1", "u1")
    handle = protocol.disconnect("c1")

    assert handle.state is ConnectionState.CLOSED
    assert not registry.is_online("u1")
    assert protocol.get("c1") is None


def test_disconnect_unregistered_and_repeated(protocol):
    protocol.connect("c1")
    assert protocol.disconnect("c1").state is ConnectionState.CLOSED
    assert protocol.disconnect("c1") is None
    assert protocol.disconnect("never-seen") is None


def test_identify_after_disconnect_fails(protocol, registry):
    protocol.connect("c1")
    protocol.disconnect("c1")
    with pytest.raises(ConnectionClosedError):
        protocol.identify("c1", "u1")
    assert registry.connection_count() == 0


def test_identify_on_closed_handle_fails(protocol):
    handle = protocol.connect("c1")
    protocol.disconnect("c1")
    with pytest.raises(ConnectionClosedError):
        handle._bind(protocol.registry, "u1")


def test_one_disconnect_keeps_other_tabs_online(protocol, registry):
    for cid in ("c1", "c2"):
        protocol.connect(cid)
        protocol.identify(cid, "u1")
    protocol.disconnect("c1")
    assert registry.connections_for("u1") == frozenset({"c2"})


def test_close_all(protocol, registry):
    for cid in ("c1", "c2", "c3"):
        protocol.connect(cid)
    protocol.identify("c1", "u1")
    protocol.identify("c2", "u2")

    assert protocol.close_all() == 3
    assert len(protocol) == 0
    assert registry.connection_count() == 0
