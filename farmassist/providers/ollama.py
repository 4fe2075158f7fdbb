"""Ollama adapter: local model, single non-streaming call.

No timeout is set here: the call inherits the caller's deadline and is
aborted when the surrounding task is cancelled.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from farmassist.errors import EmptyResponseError, ProviderConnectError, ProviderResponseError
from farmassist.models import ProviderKind, RuntimeConfig
from farmassist.providers.base import PromptRequest, Provider

logger = logging.getLogger("farmassist.providers.ollama")

OLLAMA_OPTIONS: dict[str, Any] = {
    "temperature": 0.7,
    "num_predict": 1100,
}


class OllamaProvider(Provider):
    kind = ProviderKind.OLLAMA

    def __init__(self, *, transport: httpx.AsyncBaseTransport | None = None):
        self.transport = transport

    async def generate(self, request: PromptRequest, config: RuntimeConfig) -> str:
        base_url = config.ollama_base_url
        body = {
            "model": config.ollama_model,
            "system": request.system,
            "prompt": request.user_prompt,
            "stream": False,
            "options": OLLAMA_OPTIONS,
        }

        try:
            async with httpx.AsyncClient(timeout=None, transport=self.transport) as client:
                resp = await client.post(f"{base_url}/api/generate", json=body)
        except httpx.RequestError as e:
            raise ProviderConnectError(
                f"Ollama is not reachable at {base_url}. "
                "Make sure Ollama is running or configure GEMINI_API_KEY instead."
            ) from e

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not resp.is_success:
            error = data.get("error")
            raise ProviderResponseError(
                error if isinstance(error, str) and error else "Ollama request failed.",
                status_code=resp.status_code,
            )

        reply = data.get("response")
        text = reply.strip() if isinstance(reply, str) else ""
        if not text:
            raise EmptyResponseError("Empty response from Ollama.")
        logger.debug(f"{config.ollama_model} returned {len(text)} chars")
        return text
