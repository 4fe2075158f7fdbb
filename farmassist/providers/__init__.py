"""Provider adapters: interchangeable text-generation backends behind one ``generate`` call."""

from farmassist.providers.base import PromptRequest, Provider
from farmassist.providers.gemini import GeminiProvider
from farmassist.providers.ollama import OllamaProvider

__all__ = ["PromptRequest", "Provider", "GeminiProvider", "OllamaProvider"]
