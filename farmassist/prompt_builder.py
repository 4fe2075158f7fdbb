"""Prompt builder: renders the system instruction, the per-question user prompt and the continuation prompt.

Rendering is deterministic: the same question and context always produce
byte-identical prompts.
"""

from __future__ import annotations

import json
from typing import Any

from farmassist.models import FarmContext
from farmassist.prompt_registry import get_registry

MAX_SUMMARY_FARMS = 5
MAX_SUMMARY_ACTIVE_CROPS = 8
CONTINUATION_TAIL_CHARS = 1400


def system_prompt() -> str:
    return get_registry().render("system")


def build_user_prompt(question: str, context: FarmContext) -> str:
    """Question, human summary, then the full structured context for machine-level detail."""
    return "\n".join([
        f"Farmer's Question: {question}",
        "",
        "Current Farm Context:",
        summarize_context(context),
        "",
        "Detailed Farm Data:",
        json.dumps(context.to_payload(), indent=2, ensure_ascii=False, default=str),
    ])


def build_continuation_prompt(question: str, accumulated: str) -> str:
    """Prompt for the next round: original question plus the tail of what was written so far."""
    return get_registry().render(
        "continuation",
        question=question,
        tail=accumulated[-CONTINUATION_TAIL_CHARS:],
    )


def summarize_context(context: FarmContext) -> str:
    active = [
        crop for crop in context.crops
        if _text(crop.get("status")).lower() == "active"
    ]

    top_farms = [
        f"{_text(farm.get('name'), 'Unnamed farm')} ({_text(farm.get('location'), 'no location')})"
        for farm in context.farms[:MAX_SUMMARY_FARMS]
    ]
    top_active = [_describe_crop(crop) for crop in active[:MAX_SUMMARY_ACTIVE_CROPS]]

    return "\n".join([
        f"Profile mode: {context.profile_mode}",
        f"Context generated at: {context.generated_at}",
        f"Farm count: {context.farm_count or len(context.farms)}",
        f"Crop count: {context.crop_count or len(context.crops)}",
        f"Active crop count: {context.active_crop_count or len(active)}",
        f"Location: {_describe_location(context)}",
        f"Weather: {_describe_weather(context)}",
        f"Farms: {'; '.join(top_farms) if top_farms else 'none'}",
        f"Active crops: {'; '.join(top_active) if top_active else 'none'}",
        f"Monitoring bundles: {len(context.monitoring)}",
    ])


def _describe_crop(crop: dict[str, Any]) -> str:
    name = _text(crop.get("name"), "Unknown crop")
    farm = _text(crop.get("farmName")) or _text(crop.get("farmId"), "unknown farm")
    planting = _text(crop.get("plantingDate"), "no planting date")
    harvest = _text(crop.get("expectedHarvestDate"), "no harvest date")
    return f"{name} on {farm} (planting: {planting}, harvest: {harvest})"


def _describe_location(context: FarmContext) -> str:
    location = context.location
    if location is None:
        return "unknown"
    name = location.name or "Unnamed location"
    return f"{name} ({location.latitude}, {location.longitude})"


def _describe_weather(context: FarmContext) -> str:
    weather = context.weather
    if weather is None:
        return "unknown"
    parts: list[str] = []
    if weather.temperature_c is not None:
        parts.append(f"{weather.temperature_c}°C")
    if weather.condition:
        parts.append(weather.condition)
    if weather.field_health:
        parts.append(f"field health {weather.field_health}")
    if weather.wind_speed_kph is not None:
        parts.append(f"wind {weather.wind_speed_kph} km/h")
    if weather.precipitation_mm is not None:
        parts.append(f"rain {weather.precipitation_mm} mm")
    return ", ".join(parts) if parts else "unknown"


def _text(value: Any, default: str = "") -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default
