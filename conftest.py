from __future__ import annotations

import os


os.environ.setdefault("TOMORROW_API_KEY", "test-tomorrow-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("WEATHER_TIMEZONE", "America/Sao_Paulo")
