"""Context helpers for correlating LLM calls with upstream requests."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True)
class LlmCallContext:
  """Capture upstream metadata so provider calls can be logged consistently."""

  agent: str
  lesson_id: str | None
  purpose: str | None
  call_index: str | None


_CURRENT_LLM_CONTEXT: ContextVar[LlmCallContext | None] = ContextVar("llm_call_context", default=None)


def get_llm_call_context() -> LlmCallContext | None:
  """Return the active LLM call context so providers can log rich metadata."""
  return _CURRENT_LLM_CONTEXT.get()


def describe_llm_call_context() -> str:
  """Render the active context as a compact log fragment."""
  context = get_llm_call_context()
  if context is None:
    return "agent=- purpose=-"
  return f"agent={context.agent} purpose={context.purpose or '-'} call={context.call_index or '-'} lesson_id={context.lesson_id or '-'}"


@contextmanager
def llm_call_context(*, agent: str, lesson_id: str | None, purpose: str | None, call_index: str | None) -> Iterator[LlmCallContext]:
  """Set contextual metadata for downstream LLM calls and reset it afterward."""
  context = LlmCallContext(agent=agent, lesson_id=lesson_id, purpose=purpose, call_index=call_index)
  token = _CURRENT_LLM_CONTEXT.set(context)

  try:
    yield context

  finally:
    _CURRENT_LLM_CONTEXT.reset(token)
