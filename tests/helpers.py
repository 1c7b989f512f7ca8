from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from weatherchat.entities import ForecastInterval
from weatherchat.errors import CompletionError


SAO_PAULO = ZoneInfo("America/Sao_Paulo")


class TimeController:
    def __init__(self) -> None:
        self.now = 0.0

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class FakeCompletion:
    """Answers each prompt kind from canned values, recording every call."""

    def __init__(
        self,
        *,
        locations: Optional[Dict[str, str]] = None,
        temporal: str = '{"date": "current", "time": "current", "explanation": "now"}',
        language: str = "en",
        narrative: str = "Expect a pleasant day.",
        title: str = "Weather chat",
        failing: Sequence[str] = (),
    ) -> None:
        self.locations = locations or {}
        self.temporal = temporal
        self.language = language
        self.narrative = narrative
        self.title = title
        self.failing = set(failing)
        self.calls: List[Tuple[str, str]] = []

    @staticmethod
    def kind(system_prompt: str) -> str:
        if "Extract the place" in system_prompt:
            return "location"
        if "JSON object" in system_prompt:
            return "temporal"
        if "Identify the language" in system_prompt:
            return "language"
        if "short title" in system_prompt:
            return "title"
        return "narrative"

    def complete(self, messages) -> str:
        kind = self.kind(messages[0]["content"])
        user = messages[-1]["content"]
        self.calls.append((kind, user))
        if kind in self.failing:
            raise CompletionError(f"{kind} unavailable")
        if kind == "location":
            return self.locations.get(user, "none")
        if kind == "temporal":
            return self.temporal
        if kind == "language":
            return self.language
        if kind == "title":
            return self.title
        return self.narrative

    def count(self, kind: str) -> int:
        return sum(1 for k, _ in self.calls if k == kind)


def make_interval(moment: datetime, **values: Any) -> ForecastInterval:
    payload: Dict[str, Any] = {
        "temperature": 22.4,
        "humidity": 0.65,
        "windSpeed": 3.2,
        "precipitationProbability": 0.0,
        "rainIntensity": 0.0,
        "snowIntensity": 0.0,
        "freezingRainIntensity": 0.0,
        "sleetIntensity": 0.0,
        "weatherCode": 1000,
    }
    payload.update(values)
    return ForecastInterval(start_time=moment, values=payload)


def hourly_intervals(start: datetime, hours: int, **values: Any) -> List[ForecastInterval]:
    return [make_interval(start + timedelta(hours=offset), **values) for offset in range(hours)]
