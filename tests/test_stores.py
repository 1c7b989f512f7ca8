from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from weatherchat.entities import ChatTurn
from weatherchat.errors import SessionNotFound
from weatherchat.stores import InMemoryLocationStore, InMemorySessionStore


class Clock:
    def __init__(self) -> None:
        self.now = datetime(2025, 4, 9, 12, 0, tzinfo=timezone.utc)

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)

    def __call__(self) -> datetime:
        return self.now


def test_active_session_is_reused_within_a_day() -> None:
    clock = Clock()
    store = InMemorySessionStore(clock=clock)

    first = store.find_or_create_active_session("ana")
    clock.advance(hours=23, minutes=59)
    again = store.find_or_create_active_session("ana")

    assert again.id == first.id
    assert store.find_or_create_active_session("bruno").id != first.id


def test_session_expires_after_a_day() -> None:
    clock = Clock()
    store = InMemorySessionStore(clock=clock)
    first = store.find_or_create_active_session("ana")

    clock.advance(hours=24, seconds=1)
    fresh = store.find_or_create_active_session("ana")

    assert fresh.id != first.id
    assert store.find_session_by_id(first.id) is not None
    assert store.find_or_create_active_session("ana").id == fresh.id


def test_turns_are_kept_in_order() -> None:
    clock = Clock()
    store = InMemorySessionStore(clock=clock)
    session = store.create_session("ana")

    clock.advance(minutes=1)
    store.append_turn(session.id, ChatTurn(message="answer", role="assistant", turn=2))
    store.append_turn(session.id, ChatTurn(message="question", role="user", turn=1))

    stored = store.find_session_by_id(session.id)
    assert [chat.message for chat in stored.chats] == ["question", "answer"]
    assert stored.last_turn == 2
    assert stored.updated_at == clock.now


def test_title_update_and_unknown_session() -> None:
    store = InMemorySessionStore(clock=Clock())
    session = store.create_session("ana")

    store.update_session_title(session.id, "Chuva em Recife")
    assert store.find_session_by_id(session.id).title == "Chuva em Recife"

    assert store.find_session_by_id("missing") is None
    with pytest.raises(SessionNotFound):
        store.append_turn("missing", ChatTurn(message="hi", role="user", turn=1))
    with pytest.raises(SessionNotFound):
        store.update_session_title("missing", "gone")


def test_first_saved_location_is_active() -> None:
    store = InMemoryLocationStore()

    first = store.add_location("ana", "Recife")
    second = store.add_location("ana", " Olinda ")

    assert first.is_active
    assert not second.is_active
    assert second.name == "Olinda"


def test_duplicate_location_is_rejected() -> None:
    store = InMemoryLocationStore()
    store.add_location("ana", "Recife")

    with pytest.raises(ValueError, match="already exists"):
        store.add_location("ana", "Recife")
    with pytest.raises(ValueError):
        store.add_location("ana", "  ")


def test_active_flag_is_exclusive() -> None:
    store = InMemoryLocationStore()
    store.add_location("ana", "Recife")
    olinda = store.add_location("ana", "Olinda")

    active = store.set_active_location("ana", olinda.id)

    assert active.name == "Olinda"
    assert [loc.name for loc in store.list_user_locations("ana") if loc.is_active] == ["Olinda"]
    with pytest.raises(LookupError):
        store.set_active_location("ana", "missing")
    assert store.list_user_locations("bruno") == []
