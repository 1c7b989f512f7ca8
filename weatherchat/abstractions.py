"""Contracts for the collaborators the resolution pipeline depends on."""
from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence

from weatherchat.entities import ChatSession, ChatTurn, SavedLocation

Message = Dict[str, str]


class CompletionGateway(Protocol):
    """A text-generation service: role-tagged turns in, one completion out."""

    def complete(self, messages: Sequence[Message]) -> str:
        """Return the completion text; raise ``CompletionError`` on failure."""
        ...


class SessionStore(Protocol):
    def find_or_create_active_session(self, user_id: str) -> ChatSession:
        ...

    def find_session_by_id(self, session_id: str) -> Optional[ChatSession]:
        ...

    def append_turn(self, session_id: str, turn: ChatTurn) -> ChatTurn:
        ...

    def update_session_title(self, session_id: str, title: str) -> ChatSession:
        ...


class LocationStore(Protocol):
    def list_user_locations(self, user_id: str) -> List[SavedLocation]:
        ...


__all__ = ["Message", "CompletionGateway", "SessionStore", "LocationStore"]
