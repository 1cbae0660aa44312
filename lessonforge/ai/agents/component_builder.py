"""Component builder and repairer agents."""

from __future__ import annotations

from dataclasses import dataclass

from lessonforge.ai.agents.base import BaseAgent
from lessonforge.ai.agents.prompts import render_generation_prompt, render_repair_prompt


@dataclass(frozen=True)
class BuildInput:
  outline: str
  attempt: int


@dataclass(frozen=True)
class RepairInput:
  code: str
  errors: tuple[str, ...]


class ComponentBuilderAgent(BaseAgent[BuildInput, str]):
  """Generate the TSX lesson component for one outer attempt."""

  name = "ComponentBuilder"

  async def run(self, input_data: BuildInput, *, lesson_id: str | None = None, call_index: str | None = None) -> str:
    prompt = render_generation_prompt(input_data.outline, input_data.attempt)
    return await self._complete_code(prompt, purpose=f"generate_component_attempt_{input_data.attempt}", lesson_id=lesson_id, call_index=call_index)


class ComponentRepairerAgent(BaseAgent[RepairInput, str]):
  """Ask the model to fix a component that failed validation."""

  name = "ComponentRepairer"

  async def run(self, input_data: RepairInput, *, lesson_id: str | None = None, call_index: str | None = None) -> str:
    prompt = render_repair_prompt(input_data.code, input_data.errors)
    return await self._complete_code(prompt, purpose="repair_component", lesson_id=lesson_id, call_index=call_index)
