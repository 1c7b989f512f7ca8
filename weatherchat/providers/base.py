from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from requests import Response

from weatherchat.errors import ProviderError, RateLimited, WeatherUnavailable


logger = logging.getLogger(__name__)


@dataclass
class RequestConfig:
    timeout: float = 10.0
    retries: int = 3
    initial_backoff: float = 1.0


class WeatherProvider:
    """Base class that adds timeouts and 429 retry/backoff for HTTP providers.

    Only rate-limited responses are retried. The first attempt is followed by
    at most ``retries`` further attempts; each wait honours ``retry-after``
    when the provider sends a numeric value, otherwise the delay starts at
    ``initial_backoff`` and doubles.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        request_config: Optional[RequestConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.request_config = request_config or RequestConfig()
        self.session = session or requests.Session()
        self._sleep = sleep
        self._log = logging.getLogger(self.__class__.__name__)

    def _handle_response(self, response: Response) -> Response:
        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("retry-after"))
            self._log.warning("Rate limited by provider (retry-after=%s)", retry_after)
            raise RateLimited("rate limited", retry_after=retry_after)
        if response.status_code >= 400:
            self._log.error("Provider returned %s: %s", response.status_code, response.text[:500])
            raise WeatherUnavailable(f"HTTP {response.status_code}")
        return response

    def _send(self, method: str, url: str, **kwargs) -> Response:
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.request_config.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            self._log.error("Request timed out", exc_info=exc)
            raise WeatherUnavailable("timeout") from exc
        except requests.RequestException as exc:
            self._log.error("Request failed", exc_info=exc)
            raise WeatherUnavailable("request failed") from exc
        return self._handle_response(response)

    def _request(self, method: str, url: str, **kwargs) -> Response:
        delay = self.request_config.initial_backoff
        retries = self.request_config.retries
        for attempt in range(retries + 1):
            try:
                return self._send(method, url, **kwargs)
            except RateLimited as exc:
                if attempt == retries:
                    raise WeatherUnavailable(f"rate limited after {retries} retries") from exc
                wait = exc.retry_after if exc.retry_after is not None else delay
                self._log.info("Retrying in %.1fs (retry %d of %d)", wait, attempt + 1, retries)
                self._sleep(wait)
                delay *= 2
        raise ProviderError("retry loop exited unexpectedly")  # pragma: no cover


def _parse_retry_after(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return max(seconds, 0.0)


__all__ = ["WeatherProvider", "RequestConfig"]
