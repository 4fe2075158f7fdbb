"""Weather enricher: best-effort live weather for contexts that carry a location but no weather.

A lookup failure of any kind returns the context untouched; it never blocks
or fails the reply.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from farmassist.models import FarmContext, WeatherSnapshot, utc_now_iso

logger = logging.getLogger("farmassist.weather")

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
WEATHER_SOURCE = "open-meteo"
WEATHER_TIMEOUT_SECONDS = 7.0

# WMO weather interpretation codes → coarse labels
_CONDITION_RANGES: list[tuple[set[int], str]] = [
    ({0, 1}, "Clear"),
    ({2, 3}, "Cloudy"),
    ({45, 48}, "Fog"),
    (set(range(51, 58)), "Drizzle"),
    (set(range(61, 68)) | {80, 81, 82}, "Rain"),
    (set(range(71, 78)) | {85, 86}, "Snow"),
    (set(range(95, 100)), "Thunderstorm"),
]


def describe_weather_code(code: Any) -> str:
    if isinstance(code, bool) or not isinstance(code, (int, float)):
        return "Mixed"
    for codes, label in _CONDITION_RANGES:
        if code in codes:
            return label
    return "Mixed"


async def enrich_with_weather(
    context: FarmContext,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout: float = WEATHER_TIMEOUT_SECONDS,
) -> FarmContext:
    """Return ``context`` with live weather filled in, or ``context`` itself on any failure."""
    location = context.location
    if context.weather is not None or location is None:
        return context

    try:
        payload = await asyncio.wait_for(
            _fetch_current(location.latitude, location.longitude, transport, timeout),
            timeout=timeout,
        )
    except (httpx.HTTPError, ValueError, asyncio.TimeoutError) as e:
        logger.debug(f"Weather lookup skipped: {e!r}")
        return context

    weather = _parse_current(payload)
    if weather is None:
        logger.debug("Weather lookup returned an incomplete payload")
        return context

    return context.model_copy(update={"weather": weather, "generated_at": utc_now_iso()})


async def _fetch_current(
    latitude: float,
    longitude: float,
    transport: httpx.AsyncBaseTransport | None,
    timeout: float,
) -> Any:
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": "temperature_2m,weather_code,wind_speed_10m,precipitation",
        "wind_speed_unit": "kmh",
        "timezone": "auto",
    }
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        resp = await client.get(FORECAST_URL, params=params)
        resp.raise_for_status()
        return resp.json()


def _parse_current(payload: Any) -> WeatherSnapshot | None:
    """All-or-nothing: a partially filled snapshot is never returned."""
    current = payload.get("current") if isinstance(payload, dict) else None
    if not isinstance(current, dict):
        return None

    values = [current.get(k) for k in ("temperature_2m", "wind_speed_10m", "precipitation", "weather_code")]
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in values):
        return None
    temperature, wind, precipitation, code = values

    return WeatherSnapshot(
        temperature_c=float(temperature),
        condition=describe_weather_code(code),
        wind_speed_kph=float(wind),
        precipitation_mm=float(precipitation),
        source=WEATHER_SOURCE,
        fetched_at=utc_now_iso(),
    )
