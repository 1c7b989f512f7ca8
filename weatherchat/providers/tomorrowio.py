from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError
from requests import Response

from .base import WeatherProvider
from .ratelimit import RateLimitLedger
from ..entities import ForecastInterval, ForecastWindow, LocationReference
from ..errors import WeatherUnavailable


DEFAULT_FIELDS = (
    "temperature",
    "temperatureApparent",
    "humidity",
    "windSpeed",
    "windGust",
    "windDirection",
    "cloudCover",
    "precipitationProbability",
    "precipitationIntensity",
    "precipitationType",
    "rainIntensity",
    "snowIntensity",
    "freezingRainIntensity",
    "sleetIntensity",
    "weatherCode",
    "uvIndex",
    "visibility",
    "pressureSeaLevel",
)


class TimelineInterval(BaseModel):
    startTime: datetime
    values: Dict[str, Any] = Field(default_factory=dict)


class Timeline(BaseModel):
    timestep: Optional[str] = None
    intervals: List[TimelineInterval] = Field(default_factory=list)


class TimelineData(BaseModel):
    timelines: List[Timeline] = Field(default_factory=list)


class TimelineResponse(BaseModel):
    data: TimelineData


class TomorrowIOProvider(WeatherProvider):
    base_url = "https://api.tomorrow.io/v4"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timezone: str = "America/Sao_Paulo",
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = (base_url or self.base_url).rstrip("/")
        self.timezone = timezone
        self._log = logging.getLogger(self.__class__.__name__)

    def timeline(self, window: ForecastWindow) -> List[ForecastInterval]:
        body = self.build_timeline_body(window)
        response = self._request(
            "POST",
            f"{self.base_url}/timelines",
            params={"apikey": self.api_key},
            json=body,
        )
        self._account(response)
        try:
            payload = TimelineResponse.model_validate(self._json(response))
        except ValidationError as exc:
            self._log.error("Unexpected timeline payload: %s", exc)
            raise WeatherUnavailable("invalid timeline payload") from exc
        if not payload.data.timelines or not payload.data.timelines[0].intervals:
            raise WeatherUnavailable("timeline response has no intervals")
        return [
            ForecastInterval(start_time=interval.startTime, values=interval.values)
            for interval in payload.data.timelines[0].intervals
        ]

    def build_timeline_body(self, window: ForecastWindow) -> Dict[str, Any]:
        return {
            "location": self.location_param(window.location),
            "fields": list(window.fields),
            "timesteps": [window.timestep],
            "startTime": window.start.isoformat(),
            "endTime": window.end.isoformat(),
            "units": "metric",
            "timezone": self.timezone,
        }

    @staticmethod
    def location_param(location: LocationReference) -> str:
        return location.canonical_key

    # helpers ------------------------------------------------------------
    def _account(self, response: Response) -> None:
        ledger = RateLimitLedger.from_headers(response.headers)
        ledger.log(self._log)

    def _json(self, response: Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            self._log.error("Failed to decode JSON", exc_info=exc)
            raise WeatherUnavailable("invalid json") from exc


__all__ = ["TomorrowIOProvider", "DEFAULT_FIELDS"]
