"""Shared fixtures for farmassist tests."""

from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from farmassist.sanitizer import sanitize_context


@pytest.fixture
def raw_context() -> dict[str, Any]:
    return {
        "farmCount": 1,
        "cropCount": 2,
        "activeCropCount": 1,
        "profileMode": "smallholder",
        "farms": [{"name": "Green Valley Farm", "location": "Mazowe"}],
        "crops": [
            {
                "name": "Maize",
                "farmName": "Green Valley Farm",
                "status": "Active",
                "plantingDate": "2024-11-15",
                "expectedHarvestDate": "2025-04-10",
            },
            {"name": "Soybean", "farmName": "Green Valley Farm", "status": "harvested"},
        ],
        "monitoring": [{"cropId": "c1", "pestReports": [{"pestType": "fall armyworm"}]}],
        "generatedAt": "2025-01-20T08:00:00Z",
    }


@pytest.fixture
def farm_context(raw_context):
    return sanitize_context(raw_context)


@pytest.fixture
def gemini_env() -> dict[str, str]:
    return {"GEMINI_API_KEY": "test-key", "GEMINI_MODEL": "gemini-2.5-pro"}


def gemini_body(text: str, finish_reason: str = "STOP") -> dict[str, Any]:
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": finish_reason}
        ]
    }


def recording_transport(
    responder: Callable[[httpx.Request], httpx.Response],
) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    """MockTransport that keeps every request it served."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return responder(request)

    return httpx.MockTransport(handler), seen


def request_json(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content.decode("utf-8"))
