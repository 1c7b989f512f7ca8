"""Prompt builders for every completion the pipeline requests."""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Sequence

from weatherchat.abstractions import Message
from weatherchat.entities import ChatTurn

SUPPORTED_LANGUAGES = ("pt", "en", "es")

LANGUAGE_NAMES = {"pt": "Brazilian Portuguese", "en": "English", "es": "Spanish"}

FALLBACK_NARRATIVES = {
    "pt": "Não consegui gerar uma descrição agora, mas os dados do tempo estão disponíveis acima.",
    "en": "I couldn't write a description right now, but the weather data is available above.",
    "es": "No pude generar una descripción ahora, pero los datos del tiempo están disponibles arriba.",
}

TIME_OF_DAY_LABELS = {
    "pt": {"morning": "manhã", "afternoon": "tarde", "evening": "noite", "night": "madrugada"},
    "en": {"morning": "morning", "afternoon": "afternoon", "evening": "evening", "night": "night"},
    "es": {"morning": "mañana", "afternoon": "tarde", "evening": "noche", "night": "madrugada"},
}


def language_detection_messages(text: str) -> List[Message]:
    codes = ", ".join(SUPPORTED_LANGUAGES)
    return [
        {
            "role": "system",
            "content": (
                "Identify the language of the user's message. "
                f"Answer with only one ISO 639-1 code from: {codes}. "
                "If it is none of them, answer with the closest one."
            ),
        },
        {"role": "user", "content": text},
    ]


def title_messages(text: str, language: str) -> List[Message]:
    return [
        {
            "role": "system",
            "content": (
                "Write a short title, at most six words, for a weather conversation "
                f"that starts with the message below. Write it in {LANGUAGE_NAMES[language]}. "
                "Answer with the title only, without quotes."
            ),
        },
        {"role": "user", "content": text},
    ]


def location_extraction_messages(text: str) -> List[Message]:
    return [
        {
            "role": "system",
            "content": (
                "Extract the place (city, region or coordinates) the message asks "
                "about. Answer with only the place name as written by the user, "
                "or coordinates as 'lat, lon'. If the message names no place, "
                "answer exactly: none"
            ),
        },
        {"role": "user", "content": text},
    ]


def temporal_messages(text: str, history: Sequence[ChatTurn], now: datetime) -> List[Message]:
    transcript = "\n".join(f"{turn.role}: {turn.message}" for turn in history)
    return [
        {
            "role": "system",
            "content": (
                f"Current date and time: {now.strftime('%Y-%m-%d %H:%M')} ({now.strftime('%A')}).\n"
                "Decide which date and time of day the user's latest weather question "
                "refers to, using the conversation for context.\n"
                "Return ONLY a JSON object with the keys:\n"
                '  "date": "current" or a date in YYYY-MM-DD format,\n'
                '  "time": one of "current", "morning", "afternoon", "evening", "night",\n'
                '  "explanation": one short sentence.\n'
                'Use "current" when the user asks about now or gives no date or time. '
                "Resolve relative days such as tomorrow or next Friday to an actual date."
            ),
        },
        {
            "role": "user",
            "content": f"Conversation:\n{transcript}\n\nLatest message: {text}" if transcript else text,
        },
    ]


def narrative_messages(language: str, context: Mapping[str, Any]) -> List[Message]:
    if context["is_future"]:
        moment = f"forecast for {context['target_date']} ({context['time_of_day']})"
    else:
        moment = f"current conditions ({context['time_of_day']})"
    details = "\n".join(
        [
            f"Location: {context['location']}",
            f"Moment: {moment}",
            f"Condition: {context['condition']}",
            f"Temperature: {context['temperature']}°C (high {context['high']}°C, low {context['low']}°C)",
            f"Precipitation: {context['precipitation']}",
            f"Humidity: {context['humidity']}%",
            f"Wind: {context['wind_speed']} m/s",
        ]
    )
    return [
        {
            "role": "system",
            "content": (
                "You are a friendly weather assistant. Using only the data given, "
                f"answer in {LANGUAGE_NAMES[language]} in two or three sentences. "
                "Mention the location and the time of day, and give one practical tip."
            ),
        },
        {"role": "user", "content": details},
    ]


def fallback_narrative(language: str) -> str:
    return FALLBACK_NARRATIVES.get(language, FALLBACK_NARRATIVES["pt"])


__all__ = [
    "SUPPORTED_LANGUAGES",
    "TIME_OF_DAY_LABELS",
    "language_detection_messages",
    "title_messages",
    "location_extraction_messages",
    "temporal_messages",
    "narrative_messages",
    "fallback_narrative",
]
