from __future__ import annotations

from typing import Protocol


class TaskEnqueuer(Protocol):
  """Interface for enqueuing background tasks."""

  async def enqueue_lesson(self, lesson_id: str, outline: str) -> None:
    """Enqueue a lesson generation task."""
    ...
