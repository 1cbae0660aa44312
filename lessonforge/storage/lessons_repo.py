"""Storage interfaces and records for lesson persistence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class LessonRecord:
  """Record stored in the lessons repository."""

  lesson_id: str
  title: str
  outline: str
  status: str
  created_at: datetime
  updated_at: datetime
  generated_content: str | None = None
  error_message: str | None = None


class LessonsRepository(Protocol):
  """Repository contract for lesson persistence."""

  async def create_lesson(self, *, lesson_id: str, title: str, outline: str) -> LessonRecord:
    """Insert a lesson in the generating state and return the stored row."""

  async def get_lesson(self, lesson_id: str) -> LessonRecord | None:
    """Fetch a lesson record by lesson identifier."""

  async def list_lessons(self) -> list[LessonRecord]:
    """Return all lessons, most recently created first."""

  async def mark_generated(self, lesson_id: str, *, title: str, generated_content: str) -> LessonRecord | None:
    """Move a generating lesson to generated; return None when it was not generating."""

  async def mark_failed(self, lesson_id: str, *, error_message: str) -> LessonRecord | None:
    """Move a generating lesson to failed; return None when it was not generating."""

  async def list_stale_generating(self, older_than: datetime) -> list[LessonRecord]:
    """Return generating lessons created before the cutoff."""
