"""Socket.IO namespace handlers, called directly without a server."""

import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from src.notelink.core.models import ChatMessage
from src.notelink.core.repositories.message_repository import MessageRepository
from src.notelink.core.repositories.user_repository import UserRepository
from src.notelink.realtime.events import CHAT_MESSAGE
from src.notelink.realtime.namespace import PresenceNamespace


@pytest.fixture
def namespace(hub, session_factory):
    return PresenceNamespace(hub, session_factory)


async def _online(namespace, sid, user):
    await namespace.on_connect(sid, {})
    return await namespace.on_register(sid, str(user.id))


async def test_connect_without_claim_is_unregistered(namespace, hub):
    await namespace.on_connect("s1", {})
    assert hub.protocol.get("s1") is not None
    assert hub.registry.connection_count() == 0


async def test_connect_auth_claim_registers(namespace, hub, alice):
    await namespace.on_connect("s1", {}, {"userId": str(alice.id)})
    assert hub.registry.connections_for(str(alice.id)) == frozenset({"s1"})


async def test_connect_with_bad_claim_stays_connected(namespace, hub):
    await namespace.on_connect("s1", {}, {"userId": "   "})
    assert hub.protocol.get("s1") is not None
    assert hub.registry.connection_count() == 0


async def test_register_ack(namespace, alice):
    ack = await _online(namespace, "s1", alice)
    assert ack == {"ok": True, "userId": str(alice.id)}


async def test_register_accepts_object_payload(namespace, hub, alice):
    await namespace.on_connect("s1", {})
    ack = await namespace.on_register("s1", {"userId": str(alice.id)})
    assert ack["ok"] is True
    assert hub.registry.is_online(str(alice.id))


async def test_register_rejects_empty_claim(namespace, hub):
    await namespace.on_connect("s1", {})
    ack = await namespace.on_register("s1", "")
    assert ack["ok"] is False
    assert ack["error"] == "invalid_identity"
    assert hub.registry.connection_count() == 0


async def test_register_on_unknown_connection(namespace):
    ack = await namespace.on_register("never-connected", "u1")
    assert ack == {"ok": False, "error": "connection_closed"}


async def test_dashed_event_names_reach_handlers(namespace, alice, bob):
    await _online(namespace, "s1", alice)
    ack = await namespace.trigger_event(
        "send-message", "s1", {"recipientId": str(bob.id), "text": "hello"}
    )
    assert ack["ok"] is True


async def test_disconnect_takes_user_offline(namespace, hub, alice):
    await _online(namespace, "s1", alice)
    await namespace.on_disconnect("s1", "transport close")
    assert not hub.registry.is_online(str(alice.id))
    # duplicate disconnect notifications are harmless
    await namespace.on_disconnect("s1")


async def test_send_message_requires_registration(namespace, bob):
    await namespace.on_connect("s1", {})
    ack = await namespace.on_send_message("s1", {"recipientId": str(bob.id), "text": "hi"})
    assert ack == {"ok": False, "error": "unregistered"}


async def test_send_message_rejects_non_user_identity(namespace, bob):
    await namespace.on_connect("s1", {})
    await namespace.on_register("s1", "not-a-uuid")
    ack = await namespace.on_send_message("s1", {"recipientId": str(bob.id), "text": "hi"})
    assert ack["error"] == "invalid_identity"


@pytest.mark.parametrize(
    "payload",
    [None, {"text": "hi"}, {"recipientId": "nope", "text": "hi"}, {"recipientId": str(uuid.uuid4()), "text": "  "}],
)
async def test_send_message_invalid_payload(namespace, alice, payload):
    await _online(namespace, "s1", alice)
    ack = await namespace.on_send_message("s1", payload)
    assert ack["ok"] is False
    assert ack["error"] == "invalid_payload"


async def test_send_message_to_self_is_rejected(namespace, alice):
    await _online(namespace, "s1", alice)
    ack = await namespace.on_send_message("s1", {"recipientId": str(alice.id), "text": "me"})
    assert ack["ok"] is False
    assert ack["error"] == "rejected"


async def test_send_message_persists_and_delivers(namespace, transport, test_session, alice, bob):
    await _online(namespace, "a1", alice)
    await _online(namespace, "a2", alice)
    await _online(namespace, "b1", bob)

    ack = await namespace.on_send_message("a1", {"recipientId": str(bob.id), "text": "hey bob"})

    assert ack["ok"] is True
    message = ack["message"]
    assert message["text"] == "hey bob"
    assert message["sender_id"] == str(alice.id)

    stored = (await test_session.execute(select(ChatMessage))).scalars().all()
    assert [m.body for m in stored] == ["hey bob"]
    assert str(stored[0].id) == message["id"]

    assert transport.events_for("b1") == [(CHAT_MESSAGE, message)]
    # echoed to every tab of the sender
    assert transport.event_names("a1") == [CHAT_MESSAGE]
    assert transport.event_names("a2") == [CHAT_MESSAGE]


async def test_database_down_acks_persistence_failed(namespace, transport, alice, bob, monkeypatch):
    await _online(namespace, "a1", alice)
    await _online(namespace, "b1", bob)

    async def refused(self, user_id):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(UserRepository, "get_by_id", refused)

    ack = await namespace.on_send_message("a1", {"recipientId": str(bob.id), "text": "hi"})

    assert ack == {"ok": False, "error": "persistence_failed"}
    assert transport.sent == []


async def test_failed_save_acks_persistence_failed(namespace, transport, alice, bob, monkeypatch):
    await _online(namespace, "a1", alice)

    async def broken_save(self, *args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(MessageRepository, "save", broken_save)

    ack = await namespace.on_send_message("a1", {"recipientId": str(bob.id), "text": "hi"})

    assert ack == {"ok": False, "error": "persistence_failed"}
    assert transport.sent == []
