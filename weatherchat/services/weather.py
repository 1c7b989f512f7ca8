from __future__ import annotations

import logging
from typing import List, Optional

from ..cache import WeatherCache
from ..entities import ForecastInterval, ForecastWindow
from ..providers.tomorrowio import TomorrowIOProvider


class WeatherGateway:
    """Cache-first access to the timeline provider.

    The cache is keyed by the location alone, so a fresh entry is served for
    any window requested for that location within the TTL.
    """

    def __init__(
        self,
        *,
        provider: TomorrowIOProvider,
        cache: Optional[WeatherCache] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.provider = provider
        self.cache = cache if cache is not None else WeatherCache()
        self._log = logger or logging.getLogger(self.__class__.__name__)

    def fetch(self, window: ForecastWindow) -> List[ForecastInterval]:
        cache_key = window.location.canonical_key
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._log.debug("Cache hit for %s", cache_key)
            return cached
        self._log.info(
            "Fetching timeline for %s from %s to %s",
            cache_key,
            window.start.isoformat(),
            window.end.isoformat(),
        )
        intervals = self.provider.timeline(window)
        self.cache.set(cache_key, intervals)
        return intervals


__all__ = ["WeatherGateway"]
