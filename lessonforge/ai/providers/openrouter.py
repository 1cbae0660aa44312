"""OpenRouter provider implementation using openai SDK."""

from __future__ import annotations

import logging
import os
from typing import Final

from openai import AsyncOpenAI

from lessonforge.ai.providers.base import AIModel, ModelResponse, Provider, SimpleModelResponse
from lessonforge.telemetry.context import describe_llm_call_context


class OpenRouterModel(AIModel):
  """OpenRouter chat model client."""

  provider_name = "openrouter"

  def __init__(self, name: str, api_key: str | None = None, base_url: str | None = None) -> None:
    self.name: str = name
    if not api_key:
      raise ValueError("OPENROUTER_API_KEY environment variable is required")

    # OpenRouter uses the OpenAI-compatible API; we add optional attribution headers.
    default_headers = {}
    referer = os.getenv("OPENROUTER_HTTP_REFERER")
    if referer:
      default_headers["HTTP-Referer"] = referer
    title = os.getenv("OPENROUTER_TITLE")
    if title:
      default_headers["X-Title"] = title

    # Retries belong to the orchestrator loop.
    self._client = AsyncOpenAI(api_key=api_key, base_url=base_url or "https://openrouter.ai/api/v1", default_headers=default_headers or None, max_retries=0)

  async def generate(self, prompt: str) -> ModelResponse:
    """Generate text response from OpenRouter."""
    logger = logging.getLogger("lessonforge.ai.providers.openrouter")

    dummy = self.dummy_for_current_call()
    if dummy is not None:
      return dummy

    response = await self._client.chat.completions.create(model=self.name, messages=[{"role": "user", "content": prompt}])

    if not response.choices:
      raise RuntimeError("OpenRouter returned no choices.")
    content = response.choices[0].message.content or ""
    logger.debug("OpenRouter response %s:\n%s", describe_llm_call_context(), content)
    usage = None

    if response.usage:
      usage = {"prompt_tokens": response.usage.prompt_tokens, "completion_tokens": response.usage.completion_tokens, "total_tokens": response.usage.total_tokens}

    return SimpleModelResponse(content=content, usage=usage)


class OpenRouterProvider(Provider):
  """OpenRouter provider."""

  _DEFAULT_MODEL: Final[str] = "google/gemini-2.0-flash-001"

  def __init__(self, api_key: str | None = None) -> None:
    self.name: str = "openrouter"
    self._api_key = api_key

  def get_model(self, model: str | None = None) -> AIModel:
    """Return an OpenRouter model client."""
    return OpenRouterModel(model or self._DEFAULT_MODEL, api_key=self._api_key)
