"""Gemini adapter: hosted model, one HTTP call per continuation round.

Sampling is capped at a fixed output length, so a single ``generate`` may
issue up to three calls (see ``farmassist.continuation``). Safety filters are
relaxed: agronomic questions about pesticides, fumigation or animal health
must not be refused.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from farmassist.continuation import run_continuation
from farmassist.errors import ProviderConnectError, ProviderResponseError
from farmassist.models import GenerationSegment, ProviderKind, RuntimeConfig
from farmassist.providers.base import PromptRequest, Provider

logger = logging.getLogger("farmassist.providers.gemini")

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_TIMEOUT_SECONDS = 45.0

GENERATION_CONFIG: dict[str, Any] = {
    "temperature": 0.65,
    "maxOutputTokens": 1800,
    "topP": 0.95,
    "topK": 40,
}

SAFETY_SETTINGS: list[dict[str, str]] = [
    {"category": category, "threshold": "BLOCK_NONE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]


class GeminiProvider(Provider):
    """One candidate Gemini model.

    Usage:
        provider = GeminiProvider("gemini-2.5-flash")
        text = await provider.generate(request, config)
    """

    kind = ProviderKind.GEMINI

    def __init__(
        self,
        model: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = GEMINI_TIMEOUT_SECONDS,
    ):
        self.model = model
        self.transport = transport
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{GEMINI_API_BASE}/models/{self.model}:generateContent"

    async def generate(self, request: PromptRequest, config: RuntimeConfig) -> str:
        async def request_segment(prompt: str) -> GenerationSegment:
            return await self.request_segment(prompt, request.system, config)

        return await run_continuation(request_segment, request.question, request.user_prompt)

    async def request_segment(self, prompt: str, system: str, config: RuntimeConfig) -> GenerationSegment:
        """Single generateContent call. Raises on transport failure or non-2xx."""
        body = {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": GENERATION_CONFIG,
            "safetySettings": SAFETY_SETTINGS,
        }

        try:
            resp = await asyncio.wait_for(self._post(body, config), timeout=self.timeout)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise ProviderConnectError("Failed to connect to Gemini API: Request timed out.") from e
        except httpx.RequestError as e:
            reason = str(e) or type(e).__name__
            raise ProviderConnectError(f"Failed to connect to Gemini API: {reason}") from e

        data = _json_or_empty(resp)
        if not resp.is_success:
            error = data.get("error")
            message = error.get("message") if isinstance(error, dict) else None
            raise ProviderResponseError(
                message or f"Gemini API request failed with status {resp.status_code}",
                status_code=resp.status_code,
            )

        segment = extract_segment(data)
        logger.debug(f"{self.model} returned {len(segment.text)} chars (finishReason={segment.finish_reason})")
        return segment

    async def _post(self, body: dict[str, Any], config: RuntimeConfig) -> httpx.Response:
        headers = {"x-goog-api-key": config.gemini_api_key.get_secret_value()}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            return await client.post(self.endpoint, json=body, headers=headers)


def extract_segment(data: dict[str, Any]) -> GenerationSegment:
    """Text of the first candidate (all text parts) plus its finishReason. Missing pieces yield ``""``."""
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return GenerationSegment()

    first = candidates[0]
    finish_reason = first.get("finishReason")
    content = first.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        parts = []

    text = "".join(
        part["text"] for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
    return GenerationSegment(
        text=text,
        finish_reason=finish_reason if isinstance(finish_reason, str) else None,
    )


def _json_or_empty(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
