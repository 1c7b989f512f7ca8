"""Error taxonomy shared by the resolvers, the provider client and the orchestrator."""
from __future__ import annotations

from typing import Optional


class WeatherChatError(RuntimeError):
    """Base error. ``code`` is stable and safe to expose to callers."""

    code = "INTERNAL_ERROR"


class ConfigurationError(WeatherChatError):
    code = "IMPROPERLY_CONFIGURED"


class LocationRequired(WeatherChatError):
    """No location could be resolved from any source."""

    code = "LOCATION_REQUIRED"

    def __init__(self, message: str = "please specify a location") -> None:
        super().__init__(message)


class ProviderError(WeatherChatError):
    """Base provider error."""

    code = "PROVIDER_ERROR"


class RateLimited(ProviderError):
    """Raised when the provider answers with HTTP 429."""

    code = "RATE_LIMITED"

    def __init__(self, message: str = "rate limited", retry_after: Optional[float] = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class WeatherUnavailable(ProviderError):
    """The provider returned no usable data or failed with a non-retryable error."""

    code = "WEATHER_UNAVAILABLE"


class TemporalParseError(WeatherChatError, ValueError):
    """Internal to the temporal resolver; never escapes it."""

    code = "TEMPORAL_PARSE_FAILURE"


class CompletionError(WeatherChatError):
    code = "COMPLETION_FAILED"


class SessionNotFound(WeatherChatError, LookupError):
    code = "SESSION_NOT_FOUND"


__all__ = [
    "WeatherChatError",
    "ConfigurationError",
    "LocationRequired",
    "ProviderError",
    "RateLimited",
    "WeatherUnavailable",
    "TemporalParseError",
    "CompletionError",
    "SessionNotFound",
]
