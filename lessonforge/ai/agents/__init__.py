"""Agent implementations."""

from lessonforge.ai.agents.base import BaseAgent
from lessonforge.ai.agents.component_builder import BuildInput, ComponentBuilderAgent, ComponentRepairerAgent, RepairInput
from lessonforge.ai.agents.prompts import FALLBACK_TITLE, PLACEHOLDER_TITLE
from lessonforge.ai.agents.title_extractor import TitleExtractorAgent

__all__ = ["BaseAgent", "BuildInput", "ComponentBuilderAgent", "ComponentRepairerAgent", "FALLBACK_TITLE", "PLACEHOLDER_TITLE", "RepairInput", "TitleExtractorAgent"]
