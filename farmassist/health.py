"""Health reporter: which provider and model a request would use right now."""

from __future__ import annotations

from collections.abc import Mapping

from farmassist.env_config import get_runtime_config
from farmassist.models import HealthReport, ProviderKind


def build_health(env: Mapping[str, str] | None = None) -> HealthReport:
    config = get_runtime_config(env)
    if config.use_gemini:
        provider, model = ProviderKind.GEMINI, config.gemini_model
    else:
        provider, model = ProviderKind.OLLAMA, config.ollama_model
    return HealthReport(
        provider=provider,
        model=model,
        gemini_configured=bool(config.gemini_api_key.get_secret_value()),
        netlify=config.is_netlify,
    )
