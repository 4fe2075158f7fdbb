"""PromptRegistry: loads the assistant's fixed prompt texts from YAML and renders them with Jinja2.

Prompts live in ``farmassist/prompts.yaml`` so wording can be tuned without
touching the orchestration code.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateSyntaxError, UndefinedError

logger = logging.getLogger("farmassist.prompt_registry")

_DEFAULT_PROMPTS_PATH = Path(__file__).parent / "prompts.yaml"


class PromptNotFoundError(KeyError):
    """Raised when a prompt name is not found in the registry."""


class PromptRenderError(ValueError):
    """Raised when a prompt template fails to render."""


class PromptRegistry:
    """Loads prompts from YAML once, renders them on demand.

    Usage:
        registry = PromptRegistry()
        text = registry.render("continuation", question="...", tail="...")
    """

    def __init__(self, prompts_path: Path | str | None = None):
        self._path = Path(prompts_path) if prompts_path else _DEFAULT_PROMPTS_PATH
        self._templates: dict[str, str] = {}
        self._jinja_env = Environment(loader=BaseLoader(), undefined=StrictUndefined, autoescape=False)
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self._load()

    def _load(self) -> None:
        with open(self._path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        for name, data in (raw.get("prompts") or {}).items():
            if isinstance(data, dict):
                self._templates[name] = str(data.get("template", ""))
            elif isinstance(data, str):
                self._templates[name] = data

        self._loaded = True
        logger.debug(f"Loaded {len(self._templates)} prompts from {self._path}")

    def render(self, name: str, /, **variables: Any) -> str:
        """Render prompt ``name`` with ``variables``.

        Raises:
            PromptNotFoundError: If the prompt name doesn't exist.
            PromptRenderError: If a variable is missing or the template is invalid.
        """
        self._ensure_loaded()
        template_str = self._templates.get(name)
        if template_str is None:
            raise PromptNotFoundError(f"Prompt '{name}' not found in registry. Available: {self.list_prompts()}")
        try:
            return self._jinja_env.from_string(template_str).render(**variables)
        except UndefinedError as e:
            raise PromptRenderError(f"Missing template variable in '{name}': {e}") from e
        except TemplateSyntaxError as e:
            raise PromptRenderError(f"Invalid template syntax in '{name}': {e}") from e

    def list_prompts(self) -> list[str]:
        self._ensure_loaded()
        return sorted(self._templates)


@lru_cache(maxsize=1)
def get_registry() -> PromptRegistry:
    """Process-wide registry for the packaged prompts file."""
    return PromptRegistry()
