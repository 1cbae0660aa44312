"""Base interfaces for AI providers and models."""

from __future__ import annotations

import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from lessonforge.ai.errors import ModelError
from lessonforge.telemetry.context import describe_llm_call_context, get_llm_call_context

_ENV_PREFIX = "LESSONFORGE"
_FIXTURES_DIR = Path(__file__).resolve().parents[3] / "fixtures"


class ModelResponse(Protocol):
  """Response contract for model outputs."""

  content: str
  usage: dict[str, int] | None


@dataclass
class SimpleModelResponse:
  """Minimal model response structure."""

  content: str
  usage: dict[str, int] | None = None


class TextModel(Protocol):
  """The single operation the lesson orchestrator needs from a model."""

  async def complete(self, prompt: str) -> str:
    """Return the raw text completion for the prompt."""
    ...


class AIModel(ABC):
  """Abstract base class for AI models."""

  name: str
  provider_name: str = "unknown"

  @abstractmethod
  async def generate(self, prompt: str) -> ModelResponse:
    """Generate a response for the given prompt."""

  async def complete(self, prompt: str) -> str:
    """Run one generation call and return its text, raising ModelError on any failure.

    No retry happens here; the orchestrator owns retries.
    """
    logger = logging.getLogger("lessonforge.ai.providers")
    try:
      response = await self.generate(prompt)
    except ModelError:
      raise
    except Exception as exc:
      logger.warning("Model call failed provider=%s model=%s %s error=%s", self.provider_name, self.name, describe_llm_call_context(), exc)
      raise ModelError(f"{self.provider_name} request failed: {exc}", provider=self.provider_name) from exc

    content = response.content if response is not None else None
    if not isinstance(content, str):
      raise ModelError(f"{self.provider_name} returned a response without text.", provider=self.provider_name)

    if response.usage:
      logger.info("Model usage provider=%s model=%s %s usage=%s", self.provider_name, self.name, describe_llm_call_context(), response.usage)
    return content

  @staticmethod
  def _env_agent_key(agent: str) -> str:
    """Convert CamelCase agent names into SNAKE_CASE env keys."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", agent).upper()

  @staticmethod
  def load_dummy_response(agent: str) -> str | None:
    """Return a fixture response when LESSONFORGE_USE_DUMMY_<AGENT>_RESPONSE is enabled."""
    key = AIModel._env_agent_key(agent) if not agent.isupper() else agent
    flag = os.getenv(f"{_ENV_PREFIX}_USE_DUMMY_{key}_RESPONSE", "").strip().lower()
    if flag not in {"1", "true", "yes", "on"}:
      return None

    raw_path = os.getenv(f"{_ENV_PREFIX}_DUMMY_{key}_RESPONSE_PATH")
    path = Path(raw_path) if raw_path else _FIXTURES_DIR / f"dummy_{key.lower()}_response.md"
    try:
      return path.read_text(encoding="utf-8")
    except (FileNotFoundError, PermissionError, UnicodeDecodeError) as exc:
      raise RuntimeError(f"Failed to load dummy response for {agent} from {path}: {exc}") from exc

  def dummy_for_current_call(self) -> SimpleModelResponse | None:
    """Return the fixture response for the agent named in the active call context."""
    context = get_llm_call_context()
    if context is None:
      return None
    dummy = AIModel.load_dummy_response(context.agent)
    if dummy is None:
      return None
    logging.getLogger("lessonforge.ai.providers").info("Using dummy response for agent=%s model=%s", context.agent, self.name)
    return SimpleModelResponse(content=dummy, usage=None)


class Provider(ABC):
  """Abstract base class for AI providers."""

  name: str

  @abstractmethod
  def get_model(self, model: str | None = None) -> AIModel:
    """Return the model client for the provider."""
