"""Title extractor agent implementation."""

from __future__ import annotations

from lessonforge.ai.agents.base import BaseAgent
from lessonforge.ai.agents.prompts import FALLBACK_TITLE, render_title_prompt


class TitleExtractorAgent(BaseAgent[str, str]):
  """Derive a short lesson title from the outline."""

  name = "TitleExtractor"

  async def run(self, input_data: str, *, lesson_id: str | None = None, call_index: str | None = None) -> str:
    response = await self._complete(render_title_prompt(input_data), purpose="extract_title", lesson_id=lesson_id, call_index=call_index)
    return response.strip() or FALLBACK_TITLE
