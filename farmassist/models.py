"""Data models for farmassist: all shapes crossing module boundaries are Pydantic v2 models.

Field names are snake_case in Python and camelCase on the wire (``by_alias=True``),
matching the payloads the dashboard client sends and expects.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# Farm context
# ============================================================

class FarmLocation(_CamelModel):
    name: str = ""
    latitude: float
    longitude: float
    source: str = ""


class WeatherSnapshot(_CamelModel):
    temperature_c: float | None = None
    condition: str | None = None
    field_health: str | None = None
    wind_speed_kph: float | None = None
    precipitation_mm: float | None = None
    source: str | None = None
    fetched_at: str | None = None


class FarmContext(_CamelModel):
    """Normalized, bounded snapshot of a farmer's records.

    Only ``sanitize_context`` should build one from client data; everything
    downstream trusts this shape.
    """
    farm_count: int = 0
    crop_count: int = 0
    active_crop_count: int = 0
    farms: list[dict[str, Any]] = Field(default_factory=list)
    crops: list[dict[str, Any]] = Field(default_factory=list)
    crop_patterns: list[dict[str, Any]] = Field(default_factory=list)
    monitoring: list[dict[str, Any]] = Field(default_factory=list)
    profile_mode: str = "general"
    location: FarmLocation | None = None
    weather: WeatherSnapshot | None = None
    generated_at: str = Field(default_factory=utc_now_iso)

    def to_payload(self) -> dict[str, Any]:
        """Wire shape: camelCase keys, unset optional blocks omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


# ============================================================
# Runtime configuration / health
# ============================================================

class ProviderKind(str, enum.Enum):
    GEMINI = "gemini"
    OLLAMA = "ollama"


class RuntimeConfig(BaseModel):
    """Provider selection and credentials, resolved fresh for every request."""
    gemini_api_key: SecretStr = SecretStr("")
    gemini_model: str = "gemini-2.5-flash"
    ollama_model: str = "llama3.2:3b-instruct-q4_K_M"
    ollama_base_url: str = "http://127.0.0.1:11434"
    use_gemini: bool = False
    is_netlify: bool = False


class HealthReport(_CamelModel):
    ok: bool = True
    provider: ProviderKind
    model: str
    gemini_configured: bool = False
    netlify: bool = False
    time: str = Field(default_factory=utc_now_iso)


# ============================================================
# Provider output
# ============================================================

class GenerationSegment(BaseModel):
    """One round of generated text plus the provider's stop signal."""
    text: str = ""
    finish_reason: str | None = None
