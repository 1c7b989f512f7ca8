"""Conversational weather assistant: flexible weather query resolution."""
from __future__ import annotations

__version__ = "0.1.0"
