"""Unit tests for history retention."""
from datetime import datetime, timezone

import pytest

from app.services.call_session.manager import CallLifecycleTracker
from app.services.call_session.models import CallSession
from app.services.call_session.retention import RetentionMode, RetentionPolicy


async def _completed_call(tracker, user_id, summary):
    session = await tracker.start_call(user_id)
    cid = session.conversation_id
    await tracker.end_call(cid)
    await tracker.finalize_call(cid)
    await tracker.store_transcript(cid, "transcript")
    await tracker.analyze_call(cid, summary, {"score": 1})
    return cid


def test_policy_defaults_to_no_enforcement():
    policy = RetentionPolicy()
    session = CallSession(
        conversation_id="c1",
        user_id="u1",
        intent="general",
        started_at=datetime(2000, 1, 1, tzinfo=timezone.utc),
    )

    assert policy.enforced is False
    assert policy.is_expired(session, datetime(2025, 1, 1, tzinfo=timezone.utc)) is False


def test_policy_rejects_non_positive_window():
    with pytest.raises(ValueError):
        RetentionPolicy(mode=RetentionMode.EXCLUDE, days=0)


def test_policy_window_boundary():
    policy = RetentionPolicy(mode="exclude", days=730)
    session = CallSession(
        conversation_id="c1",
        user_id="u1",
        intent="general",
        started_at=datetime(2023, 1, 1, tzinfo=timezone.utc),
    )

    # 2023-01-01 + 730 days == 2025-01-01
    assert policy.is_expired(session, datetime(2025, 1, 1, tzinfo=timezone.utc)) is False
    assert policy.is_expired(session, datetime(2025, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) is True


async def test_exclude_mode_hides_but_keeps_old_calls(memory_store, clock):
    tracker = CallLifecycleTracker(
        store=memory_store,
        clock=clock,
        retention=RetentionPolicy(mode=RetentionMode.EXCLUDE, days=30),
    )
    old_cid = await _completed_call(tracker, "u1", "old")
    clock.advance(days=31)
    await _completed_call(tracker, "u1", "recent")

    history = await tracker.get_history("u1")

    assert [entry.summary for entry in history] == ["recent"]
    assert await memory_store.get(old_cid) is not None


async def test_delete_mode_removes_old_calls_on_read(memory_store, clock):
    tracker = CallLifecycleTracker(
        store=memory_store,
        clock=clock,
        retention=RetentionPolicy(mode=RetentionMode.DELETE, days=30),
    )
    old_cid = await _completed_call(tracker, "u1", "old")
    clock.advance(days=31)

    assert await tracker.get_history("u1") == []
    assert await memory_store.get(old_cid) is None


async def test_none_mode_keeps_everything(tracker, clock):
    await _completed_call(tracker, "u1", "ancient")
    clock.advance(days=5000)

    history = await tracker.get_history("u1")

    assert [entry.summary for entry in history] == ["ancient"]


async def test_purge_expired(memory_store, clock):
    tracker = CallLifecycleTracker(
        store=memory_store,
        clock=clock,
        retention=RetentionPolicy(mode=RetentionMode.DELETE, days=30),
    )
    await _completed_call(tracker, "u1", "old")
    stale = await tracker.start_call("u2")
    clock.advance(days=31)
    fresh = await tracker.start_call("u2")

    purged = await tracker.purge_expired()

    assert purged == 2
    remaining = await memory_store.list()
    assert [session.conversation_id for session in remaining] == [fresh.conversation_id]
    assert await memory_store.get(stale.conversation_id) is None


async def test_purge_is_noop_without_delete_mode(tracker, memory_store, clock):
    await tracker.start_call("u1")
    clock.advance(days=5000)

    assert await tracker.purge_expired() == 0
    assert len(await memory_store.list()) == 1
