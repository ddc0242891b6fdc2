"""Tests for the per-chat session registry."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from x01_game.state.manager import SessionManager


def test_sessions_are_bound_per_chat_and_thread() -> None:
    manager = SessionManager()
    main = manager.create(chat_id=10)
    topic = manager.create(chat_id=10, thread_id=7)

    assert manager.get_by_chat(10) is main
    assert manager.get_by_chat(10, 7) is topic
    assert manager.get_by_id(main.session_id) is main
    assert manager.get_by_chat(11) is None
    assert len(manager) == 2


def test_create_replaces_previous_session() -> None:
    manager = SessionManager()
    first = manager.create(chat_id=10)
    second = manager.create(chat_id=10)

    assert manager.get_by_chat(10) is second
    assert manager.get_by_id(first.session_id) is None
    assert manager.get_or_create(10) is second


def test_drop_chat() -> None:
    manager = SessionManager()
    session = manager.create(chat_id=10)

    assert manager.drop_chat(10) is session
    assert manager.drop_chat(10) is None
    assert len(manager) == 0


def test_new_session_starts_in_setup() -> None:
    session = SessionManager().create(chat_id=1)

    assert session.game.phase.is_setup
    assert session.board_message_id is None
    assert session.key == (1, 0)


@pytest.mark.anyio
async def test_publish_notifies_sync_and_async_listeners() -> None:
    manager = SessionManager()
    session = manager.create(chat_id=10)
    seen = []
    async_listener = AsyncMock()

    def sync_listener(changed, context) -> None:
        seen.append((changed, context))

    manager.subscribe(sync_listener)
    manager.subscribe(sync_listener)
    manager.subscribe(async_listener)
    await manager.publish(session, "ctx")

    assert seen == [(session, "ctx")]
    async_listener.assert_awaited_once_with(session, "ctx")

    manager.unsubscribe(sync_listener)
    await manager.publish(session)
    assert len(seen) == 1
