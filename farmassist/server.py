"""farmassist API server: the HTTP surface the dashboard's chat widget talks to.

Usage:
    uvicorn farmassist.server:app --host 0.0.0.0 --port 8787
    # or
    farmassist serve --port 8787

Curl:
    curl http://localhost:8787/api/assistant -d '{"prompt": "When should I top-dress maize?", "context": {...}}'
"""

from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from farmassist.env_config import load_dotenv_if_available
from farmassist.errors import GenerationError
from farmassist.health import build_health
from farmassist.models import FarmContext, HealthReport
from farmassist.orchestrator import generate_reply
from farmassist.sanitizer import sanitize_context, sanitize_prompt
from farmassist.weather import enrich_with_weather

logger = logging.getLogger("farmassist.server")


# ============================================================
# Request / Response models
# ============================================================

class AssistantRequest(BaseModel):
    """Both fields are client-controlled and untrusted; the sanitizer shapes them."""
    prompt: Any = None
    context: Any = None


class AssistantResponse(BaseModel):
    reply: str
    contextMeta: dict[str, Any]


# ============================================================
# FastAPI app
# ============================================================

app = FastAPI(
    title="farmassist API",
    description="Farming assistant replies grounded in the farmer's own records.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _context_meta(context: FarmContext, health: HealthReport) -> dict[str, Any]:
    return {
        "farmCount": context.farm_count or len(context.farms),
        "cropCount": context.crop_count or len(context.crops),
        "activeCropCount": context.active_crop_count,
        **health.model_dump(mode="json", by_alias=True),
    }


# ============================================================
# Endpoints
# ============================================================

@app.get("/api/health")
async def health() -> dict[str, Any]:
    return build_health().model_dump(mode="json", by_alias=True)


@app.post("/api/assistant", response_model=None)
async def assistant(req: AssistantRequest) -> AssistantResponse | JSONResponse:
    prompt = sanitize_prompt(req.prompt)
    if not prompt:
        return _error(400, "Prompt is required.")

    context = await enrich_with_weather(sanitize_context(req.context))
    env = dict(os.environ)

    try:
        reply = await generate_reply(prompt, context, env)
    except GenerationError as e:
        logger.error(f"Assistant request failed ({e.status_code}): {e.message}")
        if e.status_code:
            return _error(e.status_code, e.message)
        return _error(502, f"AI request failed: {e.message}")
    except Exception:
        logger.exception("Unexpected failure while generating an assistant reply")
        return _error(500, "Unable to generate assistant response right now.")

    return AssistantResponse(reply=reply, contextMeta=_context_meta(context, build_health(env)))


def create_app(dotenv_path: str | None = None) -> FastAPI:
    """Load .env (without overriding the real environment) and return the app."""
    load_dotenv_if_available(dotenv_path)
    return app
