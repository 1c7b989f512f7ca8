"""Chat-completions gateway for any OpenAI compatible endpoint."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import requests
from requests import RequestException

from weatherchat.abstractions import Message
from weatherchat.errors import CompletionError


logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_URL = "https://api.openai.com/v1/chat/completions"


class ChatCompletionGateway:
    """Send role-tagged turns to a chat completions endpoint, return the text."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        url: str = DEFAULT_COMPLETION_URL,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.url = url
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.session = session or requests.Session()

    def complete(self, messages: Sequence[Message]) -> str:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": self.temperature,
        }
        if self.max_tokens:
            payload["max_tokens"] = self.max_tokens

        try:
            response = self.session.post(self.url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except RequestException as exc:
            logger.warning("Completion request failed: %s", exc)
            raise CompletionError(f"completion request failed: {exc}") from exc
        except ValueError as exc:
            raise CompletionError("completion response is not JSON") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise CompletionError("Unexpected completion response structure") from exc
        if not isinstance(content, str):
            raise CompletionError("completion returned no text")
        return content.strip()


__all__ = ["ChatCompletionGateway", "DEFAULT_COMPLETION_URL"]
