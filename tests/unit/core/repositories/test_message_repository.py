"""Message repository tests."""

from datetime import datetime, timedelta, timezone

import pytest

from src.notelink.core.repositories.message_repository import MessageRepository

BASE = datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def repo(test_session):
    return MessageRepository(test_session)


async def _seed(repo, alice, bob, count=5):
    saved = []
    for n in range(count):
        sender, recipient = (alice, bob) if n % 2 == 0 else (bob, alice)
        saved.append(
            await repo.save(sender.id, recipient.id, f"m{n}", BASE + timedelta(seconds=n))
        )
    return saved


async def test_save_keeps_given_timestamp(repo, alice, bob):
    message = await repo.save(alice.id, bob.id, "hello", BASE)

    assert message.id is not None
    assert message.created_at == BASE
    assert message.read is False


async def test_latest_timestamp_is_per_direction(repo, alice, bob):
    assert await repo.latest_timestamp(alice.id, bob.id) is None
    await _seed(repo, alice, bob, count=4)

    assert await repo.latest_timestamp(alice.id, bob.id) == BASE + timedelta(seconds=2)
    assert await repo.latest_timestamp(bob.id, alice.id) == BASE + timedelta(seconds=3)


async def test_conversation_before_cursor(repo, alice, bob):
    await _seed(repo, alice, bob)

    rows, has_more = await repo.get_conversation(alice.id, bob.id, limit=2, before=BASE + timedelta(seconds=3))

    assert [m.body for m in rows] == ["m1", "m2"]
    assert has_more is True

    rows, has_more = await repo.get_conversation(bob.id, alice.id, limit=10, before=BASE + timedelta(seconds=1))
    assert [m.body for m in rows] == ["m0"]
    assert has_more is False


async def test_mark_read_only_touches_incoming(repo, alice, bob):
    await _seed(repo, alice, bob)

    assert await repo.mark_conversation_read(bob.id, alice.id) == 3
    assert await repo.mark_conversation_read(bob.id, alice.id) == 0

    rows, _ = await repo.get_conversation(alice.id, bob.id)
    for message in rows:
        assert message.read is (message.recipient_id == bob.id)
        if message.read:
            assert message.read_at is not None
