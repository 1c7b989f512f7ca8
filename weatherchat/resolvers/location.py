"""Location resolution as an ordered list of strategies.

Each strategy inspects a shared ``ResolutionContext`` and either returns a
``LocationResolution`` or ``None``. The first non-empty answer wins; when no
strategy answers, ``LocationRequired`` is raised.
"""
from __future__ import annotations

import logging
import re
from functools import cached_property
from typing import Callable, List, Optional, Sequence

from weatherchat.abstractions import CompletionGateway, LocationStore
from weatherchat.entities import ChatTurn, LocationResolution, Provenance, SavedLocation
from weatherchat.errors import CompletionError, LocationRequired
from weatherchat.prompts import location_extraction_messages


logger = logging.getLogger(__name__)

CORRECTION_KEYWORDS = {
    "en": ("actually", "change", "changed", "wrong", "correct", "correction", "instead", "i meant"),
    "pt": (
        "na verdade", "mudar", "muda", "mude", "troca", "trocar", "errado", "errada",
        "corrigir", "corrige", "correção", "correto", "quis dizer",
    ),
    "es": (
        "en realidad", "cambiar", "cambia", "equivocado", "equivocada", "incorrecto",
        "corregir", "corrige", "corrección", "quise decir",
    ),
}

_CORRECTION_RE = re.compile(
    r"\b(?:%s)\b"
    % "|".join(
        re.escape(keyword)
        for keyword in sorted({k for group in CORRECTION_KEYWORDS.values() for k in group}, key=len, reverse=True)
    ),
    re.IGNORECASE,
)

_NO_MENTION = {"", "none", "null", "n/a", "nenhum", "nenhuma", "ninguno", "ninguna"}

EXPLICIT_CONFIDENCE = 0.9
UNVERIFIED_CONFIDENCE = 0.7
HISTORY_CONFIDENCE = 0.8
SAVED_MATCH_CONFIDENCE = 0.9
ACTIVE_CONFIDENCE = 0.8


def is_correction(text: str) -> bool:
    return bool(_CORRECTION_RE.search(text))


def clean_extraction(answer: Optional[str]) -> Optional[str]:
    if answer is None:
        return None
    value = answer.strip().strip("\"'`").strip().rstrip(".").strip()
    if value.lower() in _NO_MENTION:
        return None
    return value


class ResolutionContext:
    """Inputs of one resolution, with the expensive lookups memoised."""

    def __init__(
        self,
        text: str,
        user_id: str,
        history: Sequence[ChatTurn],
        extract: Callable[[str], Optional[str]],
        list_saved: Callable[[str], List[SavedLocation]],
        provided: Optional[str] = None,
    ) -> None:
        self.text = text
        self.user_id = user_id
        self.history = history
        self.provided = provided
        self._extract = extract
        self._list_saved = list_saved

    def extract(self, text: str) -> Optional[str]:
        return self._extract(text)

    @cached_property
    def mention(self) -> Optional[str]:
        return self._extract(self.text)

    @cached_property
    def correction(self) -> bool:
        return is_correction(self.text)

    @cached_property
    def saved_locations(self) -> List[SavedLocation]:
        return list(self._list_saved(self.user_id))

    def saved_match(self, name: str) -> Optional[SavedLocation]:
        wanted = name.casefold()
        for location in self.saved_locations:
            if location.name.strip().casefold() == wanted:
                return location
        return None


Strategy = Callable[[ResolutionContext], Optional[LocationResolution]]


def provided_location(ctx: ResolutionContext) -> Optional[LocationResolution]:
    value = clean_extraction(ctx.provided)
    if value is None:
        return None
    return LocationResolution(value, 1.0, Provenance.EXPLICIT_TEXT)


def correction_override(ctx: ResolutionContext) -> Optional[LocationResolution]:
    if ctx.correction and ctx.mention:
        return LocationResolution(ctx.mention, EXPLICIT_CONFIDENCE, Provenance.EXPLICIT_TEXT)
    return None


def current_mention(ctx: ResolutionContext) -> Optional[LocationResolution]:
    if not ctx.mention:
        return None
    saved = ctx.saved_match(ctx.mention)
    if saved is not None:
        return LocationResolution(saved.name, SAVED_MATCH_CONFIDENCE, Provenance.SAVED_DEFAULT)
    if ctx.saved_locations:
        return LocationResolution(ctx.mention, UNVERIFIED_CONFIDENCE, Provenance.EXPLICIT_TEXT)
    return LocationResolution(ctx.mention, EXPLICIT_CONFIDENCE, Provenance.EXPLICIT_TEXT)


def conversation_history(ctx: ResolutionContext) -> Optional[LocationResolution]:
    for turn in reversed(ctx.history):
        found = ctx.extract(turn.message)
        if found:
            return LocationResolution(found, HISTORY_CONFIDENCE, Provenance.CONVERSATION_HISTORY)
    return None


def active_saved_location(ctx: ResolutionContext) -> Optional[LocationResolution]:
    for location in ctx.saved_locations:
        if location.is_active:
            return LocationResolution(location.name, ACTIVE_CONFIDENCE, Provenance.SAVED_DEFAULT)
    return None


DEFAULT_STRATEGIES: Sequence[Strategy] = (
    provided_location,
    correction_override,
    current_mention,
    conversation_history,
    active_saved_location,
)


class LocationResolver:
    def __init__(
        self,
        completion: CompletionGateway,
        locations: LocationStore,
        strategies: Sequence[Strategy] = DEFAULT_STRATEGIES,
    ) -> None:
        self.completion = completion
        self.locations = locations
        self.strategies = tuple(strategies)
        self._log = logging.getLogger(self.__class__.__name__)

    def extract(self, text: str) -> Optional[str]:
        """Ask the completion service for the place mentioned in ``text``.

        A failed completion counts as no mention so the remaining sources
        still get a chance.
        """
        if not text or not text.strip():
            return None
        try:
            answer = self.completion.complete(location_extraction_messages(text))
        except CompletionError as exc:
            self._log.warning("Location extraction failed: %s", exc)
            return None
        return clean_extraction(answer)

    def resolve(
        self,
        text: str,
        user_id: str,
        history: Sequence[ChatTurn] = (),
        provided: Optional[str] = None,
    ) -> LocationResolution:
        ctx = ResolutionContext(
            text=text,
            user_id=user_id,
            history=history,
            extract=self.extract,
            list_saved=self.locations.list_user_locations,
            provided=provided,
        )
        for strategy in self.strategies:
            result = strategy(ctx)
            if result is not None:
                self._log.info(
                    "Resolved location %r via %s (%s, %.1f)",
                    result.value,
                    strategy.__name__,
                    result.provenance.value,
                    result.confidence,
                )
                return result
        self._log.info("No location found for user %s", user_id)
        raise LocationRequired()


__all__ = [
    "LocationResolver",
    "ResolutionContext",
    "DEFAULT_STRATEGIES",
    "is_correction",
    "clean_extraction",
]
