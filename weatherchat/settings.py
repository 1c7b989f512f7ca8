"""Environment driven settings for the weather assistant."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from weatherchat.errors import ConfigurationError

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(dotenv_path=BASE_DIR / ".env")


def env(name: str, default: str | None = None) -> str:
    """Fetch environment variables while allowing explicit defaults."""

    value = os.environ.get(name, default)
    if value is None:
        raise ConfigurationError(f"Environment variable {name} is required")
    return value


@dataclass(frozen=True)
class Settings:
    tomorrow_api_key: str
    openai_api_key: str
    openai_model: str = "gpt-4o-mini"
    completion_url: str = "https://api.openai.com/v1/chat/completions"
    tomorrow_base_url: str = "https://api.tomorrow.io/v4"
    timezone: str = "America/Sao_Paulo"
    cache_timeout: int = 300
    request_timeout: float = 10.0
    max_retries: int = 3
    default_language: str = "pt"
    log_level: str = "INFO"

    @classmethod
    def load(cls) -> "Settings":
        try:
            return cls(
                tomorrow_api_key=env("TOMORROW_API_KEY"),
                openai_api_key=env("OPENAI_API_KEY"),
                openai_model=env("OPENAI_MODEL", cls.openai_model),
                completion_url=env("COMPLETION_URL", cls.completion_url),
                tomorrow_base_url=env("TOMORROW_BASE_URL", cls.tomorrow_base_url),
                timezone=env("WEATHER_TIMEZONE", cls.timezone),
                cache_timeout=int(env("WEATHER_CACHE_TIMEOUT", str(cls.cache_timeout))),
                request_timeout=float(env("WEATHER_REQUEST_TIMEOUT", str(cls.request_timeout))),
                max_retries=int(env("WEATHER_MAX_RETRIES", str(cls.max_retries))),
                default_language=env("DEFAULT_LANGUAGE", cls.default_language),
                log_level=env("LOG_LEVEL", cls.log_level).upper(),
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.load()


__all__ = ["Settings", "env", "get_settings"]
