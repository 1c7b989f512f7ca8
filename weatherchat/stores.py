"""In-memory session and saved-location stores.

Real deployments keep these in a relational database; the in-memory versions
implement the same contracts and keep everything deterministic for tests and
for the command line entry point.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from weatherchat.entities import ChatSession, ChatTurn, SavedLocation
from weatherchat.errors import SessionNotFound

SESSION_EXPIRY = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySessionStore:
    """Chat sessions per user. A session stays active for 24 hours after creation."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = Lock()

    def create_session(self, user_id: str, title: Optional[str] = None) -> ChatSession:
        now = self._clock()
        session = ChatSession(id=uuid4().hex, user_id=user_id, title=title, created_at=now, updated_at=now)
        with self._lock:
            self._sessions[session.id] = session
        return session

    def find_or_create_active_session(self, user_id: str) -> ChatSession:
        cutoff = self._clock() - SESSION_EXPIRY
        with self._lock:
            candidates = [
                s for s in self._sessions.values() if s.user_id == user_id and s.created_at >= cutoff
            ]
        if candidates:
            return max(candidates, key=lambda s: s.created_at)
        return self.create_session(user_id)

    def find_session_by_id(self, session_id: str) -> Optional[ChatSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def append_turn(self, session_id: str, turn: ChatTurn) -> ChatTurn:
        with self._lock:
            session = self._require(session_id)
            session.chats.append(turn)
            session.chats.sort(key=lambda chat: chat.turn)
            session.updated_at = self._clock()
        return turn

    def update_session_title(self, session_id: str, title: str) -> ChatSession:
        with self._lock:
            session = self._require(session_id)
            session.title = title
            session.updated_at = self._clock()
            return session

    def _require(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFound(f"session {session_id} not found")
        return session


class InMemoryLocationStore:
    """Saved locations per user; at most one of them is active."""

    def __init__(self) -> None:
        self._locations: Dict[str, List[SavedLocation]] = {}
        self._lock = Lock()

    def list_user_locations(self, user_id: str) -> List[SavedLocation]:
        with self._lock:
            return sorted(self._locations.get(user_id, []), key=lambda loc: loc.created_at, reverse=True)

    def add_location(self, user_id: str, name: str) -> SavedLocation:
        if not name or not name.strip():
            raise ValueError("name must be provided")
        with self._lock:
            existing = self._locations.setdefault(user_id, [])
            if any(loc.name == name.strip() for loc in existing):
                raise ValueError("Location already exists for this user")
            location = SavedLocation(id=uuid4().hex, name=name.strip(), is_active=not existing)
            existing.append(location)
            return location

    def set_active_location(self, user_id: str, location_id: str) -> SavedLocation:
        with self._lock:
            existing = self._locations.get(user_id, [])
            if not any(loc.id == location_id for loc in existing):
                raise LookupError("Location not found")
            updated = [replace(loc, is_active=loc.id == location_id) for loc in existing]
            self._locations[user_id] = updated
            return next(loc for loc in updated if loc.is_active)


__all__ = ["InMemorySessionStore", "InMemoryLocationStore", "SESSION_EXPIRY"]
