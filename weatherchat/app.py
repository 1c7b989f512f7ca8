"""Wiring of the production object graph from settings."""
from __future__ import annotations

from typing import Optional

from weatherchat.cache import WeatherCache
from weatherchat.completion import ChatCompletionGateway
from weatherchat.providers.base import RequestConfig
from weatherchat.providers.tomorrowio import TomorrowIOProvider
from weatherchat.services.orchestrator import QueryOrchestrator
from weatherchat.services.weather import WeatherGateway
from weatherchat.settings import Settings
from weatherchat.stores import InMemoryLocationStore, InMemorySessionStore


def build_orchestrator(
    settings: Settings,
    *,
    sessions: Optional[InMemorySessionStore] = None,
    locations: Optional[InMemoryLocationStore] = None,
    cache: Optional[WeatherCache] = None,
) -> QueryOrchestrator:
    provider = TomorrowIOProvider(
        api_key=settings.tomorrow_api_key,
        base_url=settings.tomorrow_base_url,
        timezone=settings.timezone,
        request_config=RequestConfig(timeout=settings.request_timeout, retries=settings.max_retries),
    )
    completion = ChatCompletionGateway(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        url=settings.completion_url,
    )
    return QueryOrchestrator(
        completion=completion,
        weather=WeatherGateway(provider=provider, cache=cache or WeatherCache(ttl=settings.cache_timeout)),
        sessions=sessions or InMemorySessionStore(),
        locations=locations or InMemoryLocationStore(),
        timezone_name=settings.timezone,
        default_language=settings.default_language,
    )


__all__ = ["build_orchestrator"]
