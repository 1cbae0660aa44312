"""Base class for AI agents."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from lessonforge.ai.providers.base import TextModel
from lessonforge.ai.validation import strip_code_fences
from lessonforge.telemetry.context import llm_call_context

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseAgent(ABC, Generic[InputT, OutputT]):
  """Base agent holding the injected model client."""

  name: str

  def __init__(self, *, model: TextModel) -> None:
    self._model = model

  @abstractmethod
  async def run(self, input_data: InputT, *, lesson_id: str | None = None, call_index: str | None = None) -> OutputT:
    """Run the agent on input data."""

  async def _complete(self, prompt: str, *, purpose: str, lesson_id: str | None, call_index: str | None) -> str:
    """Call the model once with the agent stamped on the call context."""
    with llm_call_context(agent=self.name, lesson_id=lesson_id, purpose=purpose, call_index=call_index):
      return await self._model.complete(prompt)

  async def _complete_code(self, prompt: str, *, purpose: str, lesson_id: str | None, call_index: str | None) -> str:
    """Call the model and normalise the response into bare component source."""
    raw = await self._complete(prompt, purpose=purpose, lesson_id=lesson_id, call_index=call_index)
    return strip_code_fences(raw)
