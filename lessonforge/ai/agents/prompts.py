"""Prompt helpers shared by agents."""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

TITLE_MAX_CHARS = 60
FALLBACK_TITLE = "Untitled Lesson"
PLACEHOLDER_TITLE = "Generating..."


def _replace_placeholders(template: str, values: dict[str, str]) -> str:
  """Substitute {{PLACEHOLDER}} markers so prompts carry actual context."""
  rendered = template
  for key, value in values.items():
    rendered = rendered.replace(f"{{{{{key}}}}}", value)

  return rendered


def _attempt_notice(attempt: int) -> str:
  """Bias later attempts toward strict output after earlier validation failures."""
  if attempt <= 1:
    return ""
  return f"This is attempt {attempt}. Previous attempts failed validation. Ensure strict TSX and no template literals."


def render_title_prompt(outline: str) -> str:
  """Render the title extraction prompt."""
  prompt_template = _load_prompt("title.md")
  return _replace_placeholders(prompt_template, {"OUTLINE": outline, "TITLE_MAX_CHARS": str(TITLE_MAX_CHARS)})


def render_generation_prompt(outline: str, attempt: int) -> str:
  """Render the component generation prompt for the given outer attempt."""
  if attempt < 1:
    raise ValueError("attempt must be a positive integer.")
  prompt_template = _load_prompt("component_builder.md")
  rendered = _replace_placeholders(prompt_template, {"OUTLINE": outline, "ATTEMPT_NOTICE": _attempt_notice(attempt)})
  return rendered.rstrip() + "\n"


def render_repair_prompt(code: str, errors: Sequence[str]) -> str:
  """Render the repair prompt for a component that failed validation."""
  prompt_template = _load_prompt("component_repairer.md")
  # Keep the error list first so the model reads the failures before the code.
  error_lines = "\n".join(f"- {error}" for error in errors)
  return _replace_placeholders(prompt_template, {"ERRORS": error_lines, "CODE": code})


@lru_cache(maxsize=8)
def _load_prompt(name: str) -> str:
  try:
    path = Path(__file__).parents[1] / "prompts" / name
    return path.read_text(encoding="utf-8").strip()
  except (FileNotFoundError, PermissionError, UnicodeDecodeError) as exc:
    raise RuntimeError(f"Failed to load prompt '{name}': {exc}") from exc
