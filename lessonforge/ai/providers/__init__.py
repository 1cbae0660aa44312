"""Provider implementations."""

from lessonforge.ai.providers.base import AIModel, ModelResponse, Provider, SimpleModelResponse, TextModel
from lessonforge.ai.providers.gemini import GeminiModel, GeminiProvider
from lessonforge.ai.providers.openrouter import OpenRouterModel, OpenRouterProvider
from lessonforge.config import Settings


def get_provider(settings: Settings) -> Provider:
  """Return the configured provider."""
  if settings.model_provider == "openrouter":
    return OpenRouterProvider(api_key=settings.openrouter_api_key)
  return GeminiProvider(api_key=settings.gemini_api_key)


def get_model(settings: Settings) -> AIModel:
  """Return the configured model client."""
  return get_provider(settings).get_model(settings.model_name)


__all__ = ["AIModel", "ModelResponse", "SimpleModelResponse", "TextModel", "Provider", "GeminiModel", "GeminiProvider", "OpenRouterModel", "OpenRouterProvider", "get_provider", "get_model"]
