from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from weatherchat.cache import WeatherCache
from weatherchat.entities import ForecastWindow, LocationReference
from weatherchat.providers.tomorrowio import DEFAULT_FIELDS
from weatherchat.services.weather import WeatherGateway

from tests.helpers import TimeController, make_interval


class _CountingProvider:
    def __init__(self) -> None:
        self.calls = 0

    def timeline(self, window):
        self.calls += 1
        return [make_interval(window.start, temperature=20.0 + self.calls)]


def _window(location: LocationReference) -> ForecastWindow:
    now = datetime(2025, 4, 9, 12, 0, tzinfo=timezone.utc)
    return ForecastWindow(location, now, now + timedelta(days=5), DEFAULT_FIELDS)


def test_cache_entry_expires_after_ttl() -> None:
    controller = TimeController()
    cache = WeatherCache(ttl=300, time_func=controller)
    cache.set("Rio de Janeiro", ["payload"])

    controller.advance(300)
    assert cache.get("Rio de Janeiro") == ["payload"]

    controller.advance(1)
    assert cache.get("Rio de Janeiro") is None
    assert len(cache) == 0


def test_cache_last_writer_wins() -> None:
    cache = WeatherCache(time_func=TimeController())
    cache.set("Recife", "first")
    cache.set("Recife", "second")

    assert cache.get("Recife") == "second"


def test_point_key_is_stable_and_fixed_precision() -> None:
    parsed = LocationReference.parse("-22.9255, -43.1784")
    built = LocationReference.from_point(-22.9255, -43.1784)

    assert parsed == built
    assert parsed.canonical_key == "-22.9255,-43.1784"
    assert LocationReference.parse("-22.9255,-43.1784").canonical_key == parsed.canonical_key
    assert LocationReference.from_point(-22.9, -43.1).canonical_key == "-22.9000,-43.1000"


@pytest.mark.parametrize("text", ["91, 10", "-10, 181", "-90.5, 0"])
def test_point_outside_valid_range_is_rejected(text: str) -> None:
    with pytest.raises(ValueError):
        LocationReference.parse(text)


def test_name_reference_keeps_trimmed_name() -> None:
    reference = LocationReference.parse("  Belo Horizonte ")

    assert not reference.is_point
    assert reference.canonical_key == "Belo Horizonte"


def test_gateway_serves_cache_until_five_minutes() -> None:
    controller = TimeController()
    provider = _CountingProvider()
    gateway = WeatherGateway(provider=provider, cache=WeatherCache(time_func=controller))
    window = _window(LocationReference.parse("-22.9255, -43.1784"))

    first = gateway.fetch(window)
    assert provider.calls == 1

    controller.advance(4 * 60 + 59)
    second = gateway.fetch(window)
    assert provider.calls == 1
    assert second == first

    controller.advance(2)
    third = gateway.fetch(window)
    assert provider.calls == 2
    assert third[0].values["temperature"] == 22.0


def test_gateway_cache_is_keyed_by_location_only() -> None:
    provider = _CountingProvider()
    gateway = WeatherGateway(provider=provider, cache=WeatherCache(time_func=TimeController()))
    location = LocationReference.from_name("Curitiba")
    current = _window(location)
    later = ForecastWindow(location, current.start + timedelta(days=1), current.start + timedelta(days=2), DEFAULT_FIELDS)

    gateway.fetch(current)
    gateway.fetch(later)
    gateway.fetch(_window(LocationReference.from_name("Manaus")))

    assert provider.calls == 2
