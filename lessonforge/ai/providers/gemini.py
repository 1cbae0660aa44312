"""Gemini provider implementation using the google-genai SDK."""

from __future__ import annotations

import logging
from typing import Final

from google import genai

from lessonforge.ai.providers.base import AIModel, ModelResponse, Provider, SimpleModelResponse
from lessonforge.telemetry.context import describe_llm_call_context


class GeminiModel(AIModel):
  """Gemini text model client."""

  provider_name = "gemini"

  def __init__(self, name: str, api_key: str | None = None) -> None:
    self.name: str = name
    if not api_key:
      raise ValueError("GEMINI_API_KEY environment variable is required")

    self._client = genai.Client(api_key=api_key)

  async def generate(self, prompt: str) -> ModelResponse:
    """Generate text response from Gemini."""
    logger = logging.getLogger("lessonforge.ai.providers.gemini")

    # Allow deterministic local runs without spending credits.
    dummy = self.dummy_for_current_call()
    if dummy is not None:
      return dummy

    # Use the async client to avoid blocking the asyncio event loop.
    response = await self._client.aio.models.generate_content(model=self.name, contents=prompt)

    logger.debug("Gemini response %s:\n%s", describe_llm_call_context(), response.text)
    usage = None

    if response.usage_metadata:
      usage = {"prompt_tokens": response.usage_metadata.prompt_token_count, "completion_tokens": response.usage_metadata.candidates_token_count, "total_tokens": response.usage_metadata.total_token_count}
    return SimpleModelResponse(content=response.text, usage=usage)


class GeminiProvider(Provider):
  """Gemini provider."""

  _DEFAULT_MODEL: Final[str] = "gemini-2.0-flash"
  _AVAILABLE_MODELS: Final[set[str]] = {"gemini-2.5-pro", "gemini-2.5-flash", "gemini-2.0-flash", "gemini-2.0-flash-lite"}

  def __init__(self, api_key: str | None = None) -> None:
    self.name: str = "gemini"
    self._api_key = api_key

  def get_model(self, model: str | None = None) -> AIModel:
    """Return a Gemini model client."""
    model_name = model or self._DEFAULT_MODEL
    if model_name not in self._AVAILABLE_MODELS:
      raise ValueError(f"Unsupported Gemini model '{model_name}'.")

    return GeminiModel(model_name, api_key=self._api_key)
