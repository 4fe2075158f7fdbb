"""Common provider contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from farmassist.models import ProviderKind, RuntimeConfig


@dataclass(frozen=True)
class PromptRequest:
    """Rendered prompts for one reply. ``question`` is kept for continuation rounds."""
    question: str
    system: str
    user_prompt: str


class Provider(ABC):
    """A text-generation backend reachable over HTTP.

    ``generate`` returns the final reply text or raises a ``GenerationError``.
    """

    kind: ProviderKind

    @abstractmethod
    async def generate(self, request: PromptRequest, config: RuntimeConfig) -> str:
        ...
