"""Derivation of user facing fields from raw interval values."""
from __future__ import annotations

from typing import Any, Optional, Sequence, Tuple

from ..entities import ForecastInterval

# Highest priority first.
PRECIPITATION_TYPES: Sequence[Tuple[str, str]] = (
    ("rainIntensity", "rain"),
    ("snowIntensity", "snow"),
    ("freezingRainIntensity", "freezing rain"),
    ("sleetIntensity", "sleet"),
)

WEATHER_CODES = {
    0: ("Unknown", "Desconhecido", "Desconocido"),
    1000: ("Clear, Sunny", "Céu limpo", "Despejado"),
    1100: ("Mostly Clear", "Predominantemente limpo", "Mayormente despejado"),
    1101: ("Partly Cloudy", "Parcialmente nublado", "Parcialmente nublado"),
    1102: ("Mostly Cloudy", "Predominantemente nublado", "Mayormente nublado"),
    1001: ("Cloudy", "Nublado", "Nublado"),
    2000: ("Fog", "Neblina", "Niebla"),
    2100: ("Light Fog", "Neblina leve", "Niebla ligera"),
    4000: ("Drizzle", "Garoa", "Llovizna"),
    4001: ("Rain", "Chuva", "Lluvia"),
    4200: ("Light Rain", "Chuva fraca", "Lluvia ligera"),
    4201: ("Heavy Rain", "Chuva forte", "Lluvia intensa"),
    5000: ("Snow", "Neve", "Nieve"),
    5001: ("Flurries", "Flocos de neve", "Copos de nieve"),
    5100: ("Light Snow", "Neve fraca", "Nieve ligera"),
    5101: ("Heavy Snow", "Neve forte", "Nieve intensa"),
    6000: ("Freezing Drizzle", "Garoa congelante", "Llovizna helada"),
    6001: ("Freezing Rain", "Chuva congelante", "Lluvia helada"),
    6200: ("Light Freezing Rain", "Chuva congelante fraca", "Lluvia helada ligera"),
    6201: ("Heavy Freezing Rain", "Chuva congelante forte", "Lluvia helada intensa"),
    7000: ("Ice Pellets", "Granizo fino", "Granizo fino"),
    7101: ("Heavy Ice Pellets", "Granizo forte", "Granizo intenso"),
    7102: ("Light Ice Pellets", "Granizo fraco", "Granizo ligero"),
    8000: ("Thunderstorm", "Tempestade", "Tormenta"),
}
_LANGUAGE_INDEX = {"en": 0, "pt": 1, "es": 2}


def round_half_up(value: Any) -> int:
    # Half away from zero, unlike round()'s banker's rounding.
    number = float(value or 0.0)
    return int(number + 0.5) if number >= 0 else -int(-number + 0.5)


def to_percent(value: Any) -> int:
    """Convert a provider fraction (0..1) into a rounded percentage."""
    return round_half_up(float(value or 0.0) * 100)


def _format_intensity(value: float) -> str:
    return f"{round(value, 2):g}"


def precipitation_summary(interval: ForecastInterval) -> str:
    probability = to_percent(interval.value("precipitationProbability", 0.0))
    if probability == 0:
        return "0%"
    dominant = _dominant_precipitation(interval)
    if dominant is None:
        return f"{probability}%"
    label, intensity = dominant
    return f"{probability}% {label} ({_format_intensity(intensity)} mm/h)"


def _dominant_precipitation(interval: ForecastInterval) -> Optional[Tuple[str, float]]:
    for field_name, label in PRECIPITATION_TYPES:
        intensity = float(interval.value(field_name, 0.0))
        if intensity > 0:
            return label, intensity
    return None


def condition_label(code: Any, language: str = "pt") -> str:
    try:
        labels = WEATHER_CODES[int(code)]
    except (KeyError, TypeError, ValueError):
        labels = WEATHER_CODES[0]
    return labels[_LANGUAGE_INDEX.get(language, 1)]


def temperature_range(intervals: Sequence[ForecastInterval]) -> Tuple[int, int]:
    temps = [float(i.values["temperature"]) for i in intervals if i.values.get("temperature") is not None]
    if not temps:
        return 0, 0
    return round_half_up(max(temps)), round_half_up(min(temps))


__all__ = [
    "WEATHER_CODES",
    "round_half_up",
    "to_percent",
    "precipitation_summary",
    "condition_label",
    "temperature_range",
]
