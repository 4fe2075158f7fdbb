"""Runtime configuration: resolves provider selection and credentials from an environment mapping.

The core never reads ``os.environ`` behind the caller's back: every entry point
takes an ``env`` mapping (defaulting to the process environment at call time)
and resolves a fresh ``RuntimeConfig`` from it. Nothing is cached.

Usage:
    from farmassist.env_config import get_runtime_config

    cfg = get_runtime_config({"GEMINI_API_KEY": "AIza..."})
    cfg.use_gemini        # True
    cfg.gemini_model      # "gemini-2.5-flash"
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import SecretStr

from farmassist.models import RuntimeConfig

logger = logging.getLogger("farmassist.env_config")

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_OLLAMA_MODEL = "llama3.2:3b-instruct-q4_K_M"
DEFAULT_OLLAMA_BASE_URL = "http://127.0.0.1:11434"


def load_dotenv_if_available(path: str | Path | None = None) -> None:
    """Load .env file if it exists. Existing variables are never overridden."""
    candidates = [path] if path else [".env", Path.home() / ".farmassist" / ".env"]

    for candidate in candidates:
        if candidate and Path(candidate).is_file():
            logger.debug(f"Loading .env from {candidate}")
            with open(candidate) as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith("#") or "=" not in line:
                        continue
                    key, _, value = line.partition("=")
                    key = key.strip()
                    value = value.strip().strip("'\"")
                    if key and value and key not in os.environ:
                        os.environ[key] = value
            return


def get_runtime_config(env: Mapping[str, str] | None = None) -> RuntimeConfig:
    """Resolve provider settings from ``env`` (the process environment when omitted).

    Values are only checked for presence; a malformed key or URL surfaces later
    as a provider failure.
    """
    source = os.environ if env is None else env

    gemini_api_key = _read(source, "GEMINI_API_KEY")
    base_url = _read(source, "OLLAMA_BASE_URL") or DEFAULT_OLLAMA_BASE_URL
    if base_url.endswith("/"):
        base_url = base_url[:-1]

    return RuntimeConfig(
        gemini_api_key=SecretStr(gemini_api_key),
        gemini_model=_read(source, "GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        ollama_model=_read(source, "OLLAMA_MODEL") or DEFAULT_OLLAMA_MODEL,
        ollama_base_url=base_url,
        use_gemini=len(gemini_api_key) > 0,
        is_netlify=is_hosted_environment(source),
    )


def is_hosted_environment(env: Mapping[str, str]) -> bool:
    """True when running on Netlify/Lambda, where no local model is reachable."""
    return (
        _read(env, "NETLIFY").lower() == "true"
        or bool(_read(env, "AWS_LAMBDA_FUNCTION_NAME"))
        or bool(_read(env, "NETLIFY_DEV"))
    )


def _read(env: Mapping[str, str], key: str) -> str:
    value = env.get(key)
    return str(value) if value else ""
