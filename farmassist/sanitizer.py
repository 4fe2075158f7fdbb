"""Context sanitizer: the boundary between client-controlled data and the trusted FarmContext shape.

Every coercion here degrades to a default instead of raising, so a malformed
payload can never fail a request. Unknown fields are dropped.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from farmassist.models import FarmContext, FarmLocation, WeatherSnapshot, utc_now_iso

MAX_PROMPT_CHARS = 1500

RECORD_CAPS: dict[str, int] = {
    "farms": 30,
    "crops": 80,
    "cropPatterns": 12,
    "monitoring": 6,
}

_COUNT_FIELDS = {
    "farmCount": "farm_count",
    "cropCount": "crop_count",
    "activeCropCount": "active_crop_count",
}

_WEATHER_NUMBERS = {
    "temperatureC": "temperature_c",
    "windSpeedKph": "wind_speed_kph",
    "precipitationMm": "precipitation_mm",
}
_WEATHER_LABELS = {
    "condition": "condition",
    "fieldHealth": "field_health",
}
_WEATHER_META = {
    "source": "source",
    "fetchedAt": "fetched_at",
}


def sanitize_prompt(raw: Any) -> str:
    """Trim and cap the farmer's question. Non-strings become ``""``."""
    if not isinstance(raw, str):
        return ""
    return raw.strip()[:MAX_PROMPT_CHARS]


def sanitize_context(raw: Any) -> FarmContext:
    """Normalize an arbitrary client object into a bounded ``FarmContext``."""
    if not isinstance(raw, dict):
        return FarmContext()

    fields: dict[str, Any] = {}
    for key, attr in _COUNT_FIELDS.items():
        fields[attr] = _to_count(raw.get(key))

    fields["farms"] = _to_records(raw.get("farms"), RECORD_CAPS["farms"])
    fields["crops"] = _to_records(raw.get("crops"), RECORD_CAPS["crops"])
    fields["crop_patterns"] = _to_records(raw.get("cropPatterns"), RECORD_CAPS["cropPatterns"])
    fields["monitoring"] = _to_records(raw.get("monitoring"), RECORD_CAPS["monitoring"])

    profile_mode = _to_label(raw.get("profileMode"))
    fields["profile_mode"] = profile_mode or "general"
    fields["location"] = _to_location(raw.get("location"))
    fields["weather"] = _to_weather(raw.get("weather"))
    fields["generated_at"] = _to_timestamp(raw.get("generatedAt")) or utc_now_iso()

    return FarmContext(**fields)


# ============================================================
# Coercions
# ============================================================

def _to_number(value: Any) -> float | None:
    """Finite float or None. Booleans are not numbers here."""
    if isinstance(value, bool):
        return None
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _to_count(value: Any) -> int:
    number = _to_number(value)
    if number is None or number < 0:
        return 0
    return int(number)


def _to_label(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _to_records(value: Any, cap: int) -> list[dict[str, Any]]:
    """Keep key/value records in order, truncated to ``cap``."""
    if not isinstance(value, (list, tuple)):
        return []
    records = [
        dict(item)
        for item in value
        if isinstance(item, dict) and all(isinstance(k, str) for k in item)
    ]
    return records[:cap]


def _to_location(value: Any) -> FarmLocation | None:
    if not isinstance(value, dict):
        return None
    latitude = _to_number(value.get("latitude"))
    longitude = _to_number(value.get("longitude"))
    if latitude is None or longitude is None:
        return None
    return FarmLocation(
        name=_to_label(value.get("name")),
        latitude=latitude,
        longitude=longitude,
        source=_to_label(value.get("source")) or "client",
    )


def _to_weather(value: Any) -> WeatherSnapshot | None:
    if not isinstance(value, dict):
        return None

    fields: dict[str, Any] = {}
    for key, attr in _WEATHER_NUMBERS.items():
        fields[attr] = _to_number(value.get(key))
    for key, attr in _WEATHER_LABELS.items():
        fields[attr] = _to_label(value.get(key)) or None

    if all(v is None for v in fields.values()):
        return None

    for key, attr in _WEATHER_META.items():
        fields[attr] = _to_label(value.get(key)) or None
    return WeatherSnapshot(**fields)


def _to_timestamp(value: Any) -> str | None:
    """Return the client's timestamp if it parses as ISO-8601, else None."""
    text = _to_label(value)
    if not text:
        return None
    candidate = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        datetime.fromisoformat(candidate)
    except ValueError:
        return None
    return text
