"""Target date and time-of-day resolution.

The completion service is asked for a strict JSON answer. Anything that does
not validate degrades to "current" instead of raising. Valid answers are
clamped to the forecast horizon: past dates become "current", dates beyond
``FORECAST_HORIZON_DAYS`` are pulled back to the horizon.
"""
from __future__ import annotations

import json
import logging
import re
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, ValidationError, field_validator

from weatherchat.abstractions import CompletionGateway
from weatherchat.entities import (
    CURRENT,
    FORECAST_HORIZON_DAYS,
    TIME_OF_DAY_ANCHORS,
    ChatTurn,
    TemporalResolution,
)
from weatherchat.errors import CompletionError, TemporalParseError
from weatherchat.prompts import temporal_messages


logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class TemporalAnswer(BaseModel):
    date: str = CURRENT
    time: str = CURRENT
    explanation: str = ""

    @field_validator("date", "time", mode="before")
    @classmethod
    def _normalise(cls, value: object) -> str:
        if value is None:
            return CURRENT
        if not isinstance(value, str):
            raise ValueError("must be a string")
        return value.strip().lower()

    @field_validator("time")
    @classmethod
    def _known_time(cls, value: str) -> str:
        if value != CURRENT and value not in TIME_OF_DAY_ANCHORS:
            raise ValueError(f"unknown time of day: {value}")
        return value


def parse_answer(raw: str) -> TemporalAnswer:
    """Strip code fences and validate the JSON answer.

    Raises ``TemporalParseError`` on anything that is not a valid answer.
    """
    cleaned = _FENCE_RE.sub("", raw or "").strip()
    try:
        data = json.loads(cleaned)
    except ValueError as exc:
        raise TemporalParseError(f"not JSON: {cleaned[:80]!r}") from exc
    if not isinstance(data, dict):
        raise TemporalParseError("answer is not a JSON object")
    try:
        return TemporalAnswer.model_validate(data)
    except ValidationError as exc:
        raise TemporalParseError(str(exc)) from exc


def clamp(answer: TemporalAnswer, today: date) -> TemporalResolution:
    time_of_day = answer.time
    if not _ISO_DATE_RE.match(answer.date):
        return TemporalResolution(CURRENT, time_of_day, answer.explanation, is_future=False)
    try:
        target = date.fromisoformat(answer.date)
    except ValueError:
        return TemporalResolution(CURRENT, time_of_day, answer.explanation, is_future=False)
    if target < today:
        return TemporalResolution(CURRENT, time_of_day, answer.explanation, is_future=False)
    horizon = today + timedelta(days=FORECAST_HORIZON_DAYS)
    if target > horizon:
        logger.info("Clamping %s to the %d day horizon (%s)", target, FORECAST_HORIZON_DAYS, horizon)
        target = horizon
    return TemporalResolution(target.isoformat(), time_of_day, answer.explanation, is_future=True)


def time_of_day_for_hour(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 18:
        return "afternoon"
    if 18 <= hour < 22:
        return "evening"
    return "night"


class TemporalResolver:
    def __init__(self, completion: CompletionGateway, clock: Callable[[], datetime]) -> None:
        self.completion = completion
        self.clock = clock
        self._log = logging.getLogger(self.__class__.__name__)

    def resolve(
        self,
        text: str,
        history: Sequence[ChatTurn] = (),
        now: Optional[datetime] = None,
    ) -> TemporalResolution:
        now = now or self.clock()
        try:
            raw = self.completion.complete(temporal_messages(text, history, now))
            answer = parse_answer(raw)
        except (TemporalParseError, CompletionError) as exc:
            self._log.warning("Falling back to current date/time: %s", exc)
            return TemporalResolution()
        resolution = clamp(answer, now.date())
        self._log.info(
            "Resolved date=%s time=%s future=%s (%s)",
            resolution.date,
            resolution.time_of_day,
            resolution.is_future,
            resolution.explanation,
        )
        return resolution


__all__ = ["TemporalResolver", "TemporalAnswer", "parse_answer", "clamp", "time_of_day_for_hour"]
