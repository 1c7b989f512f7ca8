from .base import RequestConfig, WeatherProvider
from .ratelimit import RateLimitLedger
from .tomorrowio import DEFAULT_FIELDS, TomorrowIOProvider

__all__ = ["RequestConfig", "WeatherProvider", "RateLimitLedger", "TomorrowIOProvider", "DEFAULT_FIELDS"]
