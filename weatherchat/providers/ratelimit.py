"""Rate-limit accounting derived from provider response headers.

The ledger is rebuilt from every successful response and is only used for
logging. It never blocks a request.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

WEB_APP_HEADER = "x-ratelimit-remaining-web-app"
PLAN_HEADER_PREFIX = "x-ratelimit-remaining-plan-"
SECOND_HEADER = "x-ratelimit-remaining-second"

# The web-app counter is reported on a different scale than the plan counters.
WEB_APP_SCALE = 1000.0

DEFAULT_LIMITS = {"daily": 500.0, "hourly": 25.0, "second": 3.0}
LIMIT_HEADERS = {
    "daily": "x-ratelimit-limit-day",
    "hourly": "x-ratelimit-limit-hour",
    "second": "x-ratelimit-limit-second",
}
WARN_THRESHOLDS = {"daily": 100.0, "hourly": 5.0, "second": 1.0}


@dataclass
class RateLimitLedger:
    daily_remaining: Optional[float] = None
    hourly_remaining: Optional[float] = None
    second_remaining: Optional[float] = None
    plans: Dict[str, float] = field(default_factory=dict)
    limits: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_LIMITS))

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitLedger":
        ledger = cls()
        for name, raw in headers.items():
            key = name.lower()
            value = _to_float(raw)
            if value is None:
                continue
            if key == WEB_APP_HEADER:
                ledger.daily_remaining = value / WEB_APP_SCALE
            elif key.startswith(PLAN_HEADER_PREFIX):
                plan_id = key[len(PLAN_HEADER_PREFIX):]
                current = ledger.plans.get(plan_id)
                ledger.plans[plan_id] = value if current is None else min(current, value)
            elif key == SECOND_HEADER:
                ledger.second_remaining = value
            for window, header in LIMIT_HEADERS.items():
                if key == header and value > 0:
                    ledger.limits[window] = value
        if ledger.plans:
            ledger.hourly_remaining = min(ledger.plans.values())
        return ledger

    def remaining(self) -> Dict[str, Optional[float]]:
        return {
            "daily": self.daily_remaining,
            "hourly": self.hourly_remaining,
            "second": self.second_remaining,
        }

    def percentages(self) -> Dict[str, Optional[float]]:
        result: Dict[str, Optional[float]] = {}
        for window, value in self.remaining().items():
            if value is None:
                result[window] = None
            else:
                result[window] = round(value / self.limits[window] * 100, 1)
        return result

    def warnings(self) -> List[str]:
        messages = []
        for window, value in self.remaining().items():
            threshold = WARN_THRESHOLDS[window]
            if value is not None and value < threshold:
                messages.append(f"{window} quota low: {value:g} remaining (threshold {threshold:g})")
        return messages

    def log(self, log: logging.Logger = logger) -> None:
        log.debug("Rate limit remaining %s, percent %s", self.remaining(), self.percentages())
        for message in self.warnings():
            log.warning("Weather provider %s", message)


def _to_float(value: object) -> Optional[float]:
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


__all__ = ["RateLimitLedger", "WARN_THRESHOLDS", "DEFAULT_LIMITS"]
