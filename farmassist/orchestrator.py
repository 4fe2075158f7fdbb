"""Completion orchestrator: turns (question, context) into exactly one complete reply.

Provider priority is fixed and configuration-driven:

    1. Gemini, if an API key is configured: try each candidate model in order.
       Retryable failures advance to the next model; fatal ones abort at once.
    2. No key on a hosted environment: configuration error, no local fallback.
    3. Otherwise: Ollama, exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx
from nfo.decorators import log_call

from farmassist.env_config import get_runtime_config
from farmassist.errors import ConfigurationError, GenerationError
from farmassist.models import FarmContext, ProviderKind, RuntimeConfig
from farmassist.prompt_builder import build_user_prompt, system_prompt
from farmassist.providers import GeminiProvider, OllamaProvider, PromptRequest

logger = logging.getLogger("farmassist.orchestrator")

FALLBACK_GEMINI_MODELS = ("gemini-2.5-flash", "gemini-flash-latest")

RETRYABLE_KEYWORDS = (
    "not found",
    "not supported",
    "quota",
    "429",
    "unavailable",
    "503",
    "timed out",
)

HOSTED_WITHOUT_KEY_MESSAGE = (
    "GEMINI_API_KEY is not configured in the hosting environment. "
    "Local Ollama fallback is not reachable from a hosted deployment."
)


def is_retryable_error(error: BaseException) -> bool:
    """Worth trying the next candidate model? Decided from the message text alone."""
    message = str(error).lower()
    return any(keyword in message for keyword in RETRYABLE_KEYWORDS)


def candidate_models(config: RuntimeConfig) -> list[str]:
    """Configured model first, then the fixed fallbacks, duplicates removed."""
    return list(dict.fromkeys([config.gemini_model, *FALLBACK_GEMINI_MODELS]))


def select_provider(config: RuntimeConfig) -> ProviderKind:
    """Priority policy. Raises ``ConfigurationError`` when nothing is reachable."""
    if config.use_gemini:
        return ProviderKind.GEMINI
    if config.is_netlify:
        raise ConfigurationError(HOSTED_WITHOUT_KEY_MESSAGE)
    return ProviderKind.OLLAMA


async def generate_reply(
    prompt: str,
    context: FarmContext,
    env: Mapping[str, str] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Generate one complete reply for a sanitized prompt and context.

    Args:
        prompt: Sanitized question (see ``sanitize_prompt``).
        context: Sanitized, optionally weather-enriched context.
        env: Environment mapping to resolve provider settings from; the process
            environment when omitted. Resolved once per call.
        transport: Optional httpx transport shared by provider calls (tests).

    Raises:
        GenerationError: With ``status_code`` suitable for the HTTP response.
    """
    return await _generate(prompt, context, get_runtime_config(env), transport)


@log_call
async def _generate(
    prompt: str,
    context: FarmContext,
    config: RuntimeConfig,
    transport: httpx.AsyncBaseTransport | None,
) -> str:
    # Logged with the resolved config only; the raw environment holds secrets.
    kind = select_provider(config)
    logger.debug(f"Provider selected: {kind.value}")

    request = PromptRequest(
        question=prompt,
        system=system_prompt(),
        user_prompt=build_user_prompt(prompt, context),
    )

    if kind is ProviderKind.GEMINI:
        return await _generate_with_failover(request, config, transport)
    return await OllamaProvider(transport=transport).generate(request, config)


async def _generate_with_failover(
    request: PromptRequest,
    config: RuntimeConfig,
    transport: httpx.AsyncBaseTransport | None,
) -> str:
    last_error: GenerationError | None = None

    for model in candidate_models(config):
        try:
            return await GeminiProvider(model, transport=transport).generate(request, config)
        except GenerationError as e:
            if not is_retryable_error(e):
                logger.warning(f"Gemini model {model} failed with a fatal error: {e}")
                raise
            logger.warning(f"Gemini model {model} failed, trying next candidate: {e}")
            last_error = e

    if last_error is None:
        raise GenerationError("No Gemini model candidates configured")
    raise last_error
