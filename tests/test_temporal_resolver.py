from __future__ import annotations

from datetime import date, timedelta

import pytest

from weatherchat.entities import CURRENT, ChatTurn
from weatherchat.errors import TemporalParseError
from weatherchat.resolvers.temporal import (
    TemporalAnswer,
    TemporalResolver,
    clamp,
    parse_answer,
    time_of_day_for_hour,
)

from tests.helpers import FakeCompletion


FENCED_TOMORROW = """```json
{"date": "2025-04-10", "time": "Afternoon", "explanation": "tomorrow afternoon"}
```"""


def _resolver(completion: FakeCompletion, fixed_now) -> TemporalResolver:
    return TemporalResolver(completion, clock=lambda: fixed_now)


def test_tomorrow_afternoon(fixed_now) -> None:
    resolver = _resolver(FakeCompletion(temporal=FENCED_TOMORROW), fixed_now)

    result = resolver.resolve("What will the weather be like tomorrow afternoon in São Paulo?")

    assert result.date == "2025-04-10"
    assert result.time_of_day == "afternoon"
    assert result.is_future is True
    assert result.anchor_hour == 15
    assert result.explanation == "tomorrow afternoon"


def test_history_is_sent_as_transcript(fixed_now) -> None:
    completion = FakeCompletion()
    history = [ChatTurn(message="Weather in Recife?", role="user", turn=1)]

    _resolver(completion, fixed_now).resolve("and on Friday?", history)

    kind, content = completion.calls[0]
    assert kind == "temporal"
    assert "user: Weather in Recife?" in content
    assert content.endswith("Latest message: and on Friday?")


def test_current_answer(fixed_now) -> None:
    result = _resolver(FakeCompletion(), fixed_now).resolve("how is it now?")

    assert result.date == CURRENT
    assert result.time_of_day == CURRENT
    assert result.is_future is False
    assert result.target_date is None


@pytest.mark.parametrize(
    "raw",
    [
        "tomorrow, I think",
        "[]",
        '{"date": "2025-04-10", "time": "lunchtime"}',
        '{"date": 20250410, "time": "morning"}',
    ],
)
def test_unusable_answers_fall_back_to_current(fixed_now, raw: str) -> None:
    result = _resolver(FakeCompletion(temporal=raw), fixed_now).resolve("weather?")

    assert (result.date, result.time_of_day, result.is_future) == (CURRENT, CURRENT, False)


def test_completion_failure_falls_back_to_current(fixed_now) -> None:
    result = _resolver(FakeCompletion(failing=["temporal"]), fixed_now).resolve("weather tomorrow?")

    assert result.date == CURRENT
    assert result.is_future is False


def test_parse_answer_rejects_non_json() -> None:
    with pytest.raises(TemporalParseError):
        parse_answer("")


def test_parse_answer_defaults_missing_keys() -> None:
    answer = parse_answer('{"time": "NIGHT"}')

    assert answer.date == CURRENT
    assert answer.time == "night"


TODAY = date(2025, 4, 9)


def test_past_date_becomes_current() -> None:
    result = clamp(TemporalAnswer(date="2025-04-01", time="morning"), TODAY)

    assert result.date == CURRENT
    assert result.time_of_day == "morning"
    assert result.is_future is False


def test_today_is_a_future_query() -> None:
    result = clamp(TemporalAnswer(date="2025-04-09", time="evening"), TODAY)

    assert result.date == "2025-04-09"
    assert result.is_future is True


def test_horizon_day_is_kept_and_later_days_are_clamped() -> None:
    assert clamp(TemporalAnswer(date="2025-04-14"), TODAY).date == "2025-04-14"
    assert clamp(TemporalAnswer(date="2025-05-30"), TODAY).date == "2025-04-14"


@pytest.mark.parametrize("value", ["next friday", "2025-13-40", "10/04/2025"])
def test_non_iso_dates_become_current(value: str) -> None:
    assert clamp(TemporalAnswer(date=value), TODAY).date == CURRENT


@pytest.mark.parametrize("offset", range(-3, 12))
def test_resolved_dates_stay_within_horizon(offset: int) -> None:
    target = TODAY + timedelta(days=offset)
    result = clamp(TemporalAnswer(date=target.isoformat()), TODAY)

    if result.date == CURRENT:
        assert offset < 0
    else:
        assert TODAY <= result.target_date <= TODAY + timedelta(days=5)
        assert result.is_future


@pytest.mark.parametrize(
    "hour, expected",
    [(4, "night"), (5, "morning"), (11, "morning"), (12, "afternoon"), (17, "afternoon"), (18, "evening"), (22, "night")],
)
def test_time_of_day_buckets(hour: int, expected: str) -> None:
    assert time_of_day_for_hour(hour) == expected
