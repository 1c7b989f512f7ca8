from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

_POINT_RE = re.compile(r"^\s*(-?\d{1,3}(?:\.\d+)?)\s*,\s*(-?\d{1,3}(?:\.\d+)?)\s*$")

CURRENT = "current"
TIME_OF_DAY_ANCHORS = {"morning": 9, "afternoon": 15, "evening": 18, "night": 21}
FORECAST_HORIZON_DAYS = 5


@dataclass(frozen=True)
class LocationReference:
    """Either a free-text place name or a geographic point, never both."""

    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __post_init__(self) -> None:
        has_point = self.latitude is not None or self.longitude is not None
        if has_point == (self.name is not None):
            raise ValueError("exactly one of name or point must be set")
        if has_point:
            if self.latitude is None or self.longitude is None:
                raise ValueError("a point needs both latitude and longitude")
            if not -90.0 <= self.latitude <= 90.0:
                raise ValueError(f"latitude out of range: {self.latitude}")
            if not -180.0 <= self.longitude <= 180.0:
                raise ValueError(f"longitude out of range: {self.longitude}")
        elif not self.name.strip():
            raise ValueError("location name must not be empty")

    @classmethod
    def from_name(cls, name: str) -> "LocationReference":
        return cls(name=name.strip())

    @classmethod
    def from_point(cls, latitude: float, longitude: float) -> "LocationReference":
        return cls(latitude=float(latitude), longitude=float(longitude))

    @classmethod
    def parse(cls, text: str) -> "LocationReference":
        """Build a point from ``"lat, lon"`` text, a name otherwise."""
        match = _POINT_RE.match(text)
        if match:
            return cls.from_point(float(match.group(1)), float(match.group(2)))
        return cls.from_name(text)

    @property
    def is_point(self) -> bool:
        return self.name is None

    @property
    def canonical_key(self) -> str:
        if self.is_point:
            return f"{self.latitude:.4f},{self.longitude:.4f}"
        return self.name.strip()

    @property
    def label(self) -> str:
        return self.canonical_key


class Provenance(str, Enum):
    EXPLICIT_TEXT = "explicit-text"
    CONVERSATION_HISTORY = "conversation-history"
    SAVED_DEFAULT = "saved-default"
    ACTIVE_DEFAULT = "active-default"


@dataclass(frozen=True)
class LocationResolution:
    value: str
    confidence: float
    provenance: Provenance

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    @property
    def reference(self) -> LocationReference:
        return LocationReference.parse(self.value)


@dataclass(frozen=True)
class TemporalResolution:
    """Target date and time of day of a query.

    ``date`` is ``"current"`` or an ISO date; ``time_of_day`` is ``"current"``
    or one of the keys of ``TIME_OF_DAY_ANCHORS``.
    """

    date: str = CURRENT
    time_of_day: str = CURRENT
    explanation: str = ""
    is_future: bool = False

    @property
    def target_date(self) -> Optional[date]:
        if self.date == CURRENT:
            return None
        return date.fromisoformat(self.date)

    @property
    def anchor_hour(self) -> Optional[int]:
        return TIME_OF_DAY_ANCHORS.get(self.time_of_day)


@dataclass(frozen=True)
class ForecastWindow:
    location: LocationReference
    start: datetime
    end: datetime
    fields: Tuple[str, ...]
    timestep: str = "1h"

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError("forecast window end must not precede its start")

    @classmethod
    def for_resolution(
        cls,
        location: LocationReference,
        temporal: TemporalResolution,
        now: datetime,
        fields: Tuple[str, ...],
    ) -> "ForecastWindow":
        target = temporal.target_date
        if target is None:
            return cls(location, now, now + timedelta(days=FORECAST_HORIZON_DAYS), fields)
        start = datetime.combine(target, time(0, 0), tzinfo=now.tzinfo)
        return cls(location, start, start + timedelta(days=1), fields)


@dataclass(frozen=True)
class ForecastInterval:
    start_time: datetime
    values: Mapping[str, Any]

    def value(self, name: str, default: Any = None) -> Any:
        result = self.values.get(name)
        return default if result is None else result


@dataclass(frozen=True)
class NormalizedWeatherResult:
    location: str
    temperature: int
    high: int
    low: int
    condition: str
    precipitation: str
    precipitation_probability: int
    humidity: int
    wind_speed: float
    weather_code: int
    time_of_day: str
    is_future: bool
    target_time: datetime
    query_time: datetime
    narrative: str

    def as_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["target_time"] = self.target_time.isoformat()
        payload["query_time"] = self.query_time.isoformat()
        return payload


@dataclass(frozen=True)
class WeatherAnswer:
    result: NormalizedWeatherResult
    session_id: str


@dataclass
class ChatTurn:
    message: str
    role: str
    turn: int
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ChatSession:
    id: str
    user_id: str
    title: Optional[str] = None
    chats: List[ChatTurn] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def last_turn(self) -> int:
        return max((chat.turn for chat in self.chats), default=0)


@dataclass(frozen=True)
class SavedLocation:
    id: str
    name: str
    is_active: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = [
    "CURRENT",
    "TIME_OF_DAY_ANCHORS",
    "FORECAST_HORIZON_DAYS",
    "LocationReference",
    "Provenance",
    "LocationResolution",
    "TemporalResolution",
    "ForecastWindow",
    "ForecastInterval",
    "NormalizedWeatherResult",
    "WeatherAnswer",
    "ChatTurn",
    "ChatSession",
    "SavedLocation",
]
