"""farmassist: farming assistant replies from hosted or local LLMs, one complete answer per question.

Usage:
    from farmassist import enrich_with_weather, generate_reply, sanitize_context, sanitize_prompt

    context = await enrich_with_weather(sanitize_context(raw_context))
    reply = await generate_reply(sanitize_prompt(raw_prompt), context)
"""

__version__ = "0.1.0"

from farmassist.env_config import get_runtime_config, load_dotenv_if_available
from farmassist.errors import (
    ConfigurationError,
    EmptyResponseError,
    GenerationError,
    ProviderConnectError,
    ProviderResponseError,
)
from farmassist.health import build_health
from farmassist.models import (
    FarmContext,
    FarmLocation,
    GenerationSegment,
    HealthReport,
    ProviderKind,
    RuntimeConfig,
    WeatherSnapshot,
)
from farmassist.orchestrator import candidate_models, generate_reply, is_retryable_error, select_provider
from farmassist.sanitizer import sanitize_context, sanitize_prompt
from farmassist.weather import enrich_with_weather

# Logging
from farmassist.logging_setup import setup_logging, get_logger

__all__ = [
    # Entry points
    "sanitize_prompt",
    "sanitize_context",
    "enrich_with_weather",
    "generate_reply",
    "build_health",
    "get_runtime_config",
    "load_dotenv_if_available",
    # Policy
    "candidate_models",
    "is_retryable_error",
    "select_provider",
    # Models
    "FarmContext",
    "FarmLocation",
    "GenerationSegment",
    "HealthReport",
    "ProviderKind",
    "RuntimeConfig",
    "WeatherSnapshot",
    # Errors
    "GenerationError",
    "ProviderConnectError",
    "ProviderResponseError",
    "ConfigurationError",
    "EmptyResponseError",
    # Logging
    "setup_logging",
    "get_logger",
]
