"""Flexible weather query pipeline.

Resolves the place and the moment a message refers to, fetches the matching
forecast window, picks the interval that answers the question, synthesizes a
narrative and records both sides of the exchange in the chat session.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from ..abstractions import CompletionGateway, LocationStore, SessionStore
from ..entities import (
    CURRENT,
    ChatSession,
    ChatTurn,
    ForecastInterval,
    ForecastWindow,
    LocationResolution,
    NormalizedWeatherResult,
    TemporalResolution,
    WeatherAnswer,
)
from ..errors import CompletionError, LocationRequired
from ..prompts import (
    SUPPORTED_LANGUAGES,
    TIME_OF_DAY_LABELS,
    fallback_narrative,
    language_detection_messages,
    narrative_messages,
    title_messages,
)
from ..providers.tomorrowio import DEFAULT_FIELDS
from ..resolvers.location import LocationResolver
from ..resolvers.temporal import TemporalResolver, time_of_day_for_hour
from .formatting import (
    condition_label,
    precipitation_summary,
    round_half_up,
    temperature_range,
    to_percent,
)
from .weather import WeatherGateway


logger = logging.getLogger(__name__)

TITLE_FALLBACK_LENGTH = 50


def to_local(moment: datetime, tz: ZoneInfo) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def select_interval(
    intervals: Sequence[ForecastInterval],
    temporal: TemporalResolution,
    tz: ZoneInfo,
    today: Optional[date] = None,
) -> ForecastInterval:
    """Pick the interval answering the query.

    Current queries use the first interval, or today's interval at the
    time-of-day anchor when a time of day was asked for. Future queries use
    the interval on the target date at the anchor, else the first one on that
    date, else the first interval overall (possibly another day).
    """
    target = temporal.target_date
    anchor = temporal.anchor_hour
    if target is None:
        if today is None:
            return intervals[0]
        if anchor is not None:
            for interval in intervals:
                local = to_local(interval.start_time, tz)
                if local.date() == today and local.hour == anchor:
                    return interval
        first_day = to_local(intervals[0].start_time, tz).date()
        if first_day != today:
            logger.warning("Current query for %s answered from a timeline starting on %s", today, first_day)
        return intervals[0]
    same_day = [i for i in intervals if to_local(i.start_time, tz).date() == target]
    if not same_day:
        logger.warning("No interval on %s, falling back to %s", target, intervals[0].start_time.isoformat())
        return intervals[0]
    if anchor is not None:
        for interval in same_day:
            if to_local(interval.start_time, tz).hour == anchor:
                return interval
    return same_day[0]


class QueryOrchestrator:
    def __init__(
        self,
        *,
        completion: CompletionGateway,
        weather: WeatherGateway,
        sessions: SessionStore,
        locations: LocationStore,
        location_resolver: Optional[LocationResolver] = None,
        temporal_resolver: Optional[TemporalResolver] = None,
        timezone_name: str = "America/Sao_Paulo",
        default_language: str = "pt",
        clock=None,
        fields: Tuple[str, ...] = DEFAULT_FIELDS,
    ) -> None:
        self.completion = completion
        self.weather = weather
        self.sessions = sessions
        self.tz = ZoneInfo(timezone_name)
        self.clock = clock or (lambda: datetime.now(self.tz))
        self.default_language = default_language
        self.fields = tuple(fields)
        self.location_resolver = location_resolver or LocationResolver(completion, locations)
        self.temporal_resolver = temporal_resolver or TemporalResolver(completion, self.clock)
        self._log = logging.getLogger(self.__class__.__name__)

    def resolve_flexible_weather(
        self,
        text: str,
        user_id: str,
        session: Optional[ChatSession] = None,
        location: Optional[str] = None,
    ) -> WeatherAnswer:
        query_time = to_local(self.clock(), self.tz)
        session = session or self.sessions.find_or_create_active_session(user_id)
        history = self._history(session)

        place = self.location_resolver.resolve(text, user_id, history, provided=location)
        temporal = self.temporal_resolver.resolve(text, history, now=query_time)

        try:
            reference = place.reference
        except ValueError as exc:
            self._log.warning("Unusable location %r: %s", place.value, exc)
            raise LocationRequired() from exc

        window = ForecastWindow.for_resolution(reference, temporal, query_time, self.fields)
        intervals = self.weather.fetch(window)
        selected = select_interval(intervals, temporal, self.tz, today=query_time.date())
        target_time = to_local(selected.start_time, self.tz)
        if temporal.time_of_day == CURRENT or (
            not temporal.is_future and target_time.hour != temporal.anchor_hour
        ):
            time_of_day = time_of_day_for_hour(target_time.hour)
        else:
            time_of_day = temporal.time_of_day

        language = self._detect_language(text)
        same_day = [i for i in intervals if to_local(i.start_time, self.tz).date() == target_time.date()]
        high, low = temperature_range(same_day)
        code = int(selected.value("weatherCode", 0))
        fields: Dict[str, Any] = {
            "location": reference.label,
            "temperature": round_half_up(selected.value("temperature", 0.0)),
            "high": high,
            "low": low,
            "condition": condition_label(code, language),
            "precipitation": precipitation_summary(selected),
            "precipitation_probability": to_percent(selected.value("precipitationProbability", 0.0)),
            "humidity": to_percent(selected.value("humidity", 0.0)),
            "wind_speed": round(float(selected.value("windSpeed", 0.0)), 1),
            "weather_code": code,
        }
        narrative = self._narrate(
            language,
            {
                **fields,
                "time_of_day": TIME_OF_DAY_LABELS[language][time_of_day],
                "is_future": temporal.is_future,
                "target_date": target_time.date().isoformat(),
            },
        )
        result = NormalizedWeatherResult(
            **fields,
            time_of_day=time_of_day,
            is_future=temporal.is_future,
            target_time=target_time,
            query_time=query_time,
            narrative=narrative,
        )
        self._record(session, text, result, place, temporal, language)
        return WeatherAnswer(result=result, session_id=session.id)

    # helpers ------------------------------------------------------------
    def _history(self, session: ChatSession) -> List[ChatTurn]:
        stored = self.sessions.find_session_by_id(session.id)
        chats = stored.chats if stored is not None else session.chats
        return sorted(chats, key=lambda chat: chat.turn)

    def _detect_language(self, text: str) -> str:
        try:
            answer = self.completion.complete(language_detection_messages(text))
        except CompletionError as exc:
            self._log.warning("Language detection failed, using %s: %s", self.default_language, exc)
            return self.default_language
        code = answer.strip().strip(".\"'").lower()[:2]
        return code if code in SUPPORTED_LANGUAGES else self.default_language

    def _narrate(self, language: str, context: Dict[str, Any]) -> str:
        try:
            return self.completion.complete(narrative_messages(language, context))
        except CompletionError as exc:
            self._log.warning("Narrative synthesis failed: %s", exc)
            return fallback_narrative(language)

    def _title(self, text: str, language: str) -> str:
        try:
            title = self.completion.complete(title_messages(text, language)).strip().strip("\"'")
        except CompletionError as exc:
            self._log.warning("Title generation failed: %s", exc)
            title = ""
        return title or text.strip()[:TITLE_FALLBACK_LENGTH]

    def _record(
        self,
        session: ChatSession,
        text: str,
        result: NormalizedWeatherResult,
        place: LocationResolution,
        temporal: TemporalResolution,
        language: str,
    ) -> None:
        stored = self.sessions.find_session_by_id(session.id) or session
        base = stored.last_turn
        self.sessions.append_turn(
            session.id,
            ChatTurn(
                message=text,
                role="user",
                turn=base + 1,
                metadata={
                    "location": place.value,
                    "locationSource": place.provenance.value,
                    "locationConfidence": place.confidence,
                    "date": temporal.date,
                    "time": temporal.time_of_day,
                    "language": language,
                },
            ),
        )
        self.sessions.append_turn(
            session.id,
            ChatTurn(message=result.narrative, role="assistant", turn=base + 2, metadata=result.as_dict()),
        )
        if not stored.title:
            self.sessions.update_session_title(session.id, self._title(text, language))


__all__ = ["QueryOrchestrator", "select_interval", "to_local"]
