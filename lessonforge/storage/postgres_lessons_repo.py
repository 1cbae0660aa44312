"""Postgres-backed repository for lesson persistence using SQLAlchemy."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select, update

from lessonforge.core.database import get_session_factory
from lessonforge.schema.lessons import Lesson, LessonStatus
from lessonforge.storage.lessons_repo import LessonRecord, LessonsRepository

logger = logging.getLogger(__name__)


def _to_record(lesson: Lesson) -> LessonRecord:
  return LessonRecord(
    lesson_id=lesson.lesson_id,
    title=lesson.title,
    outline=lesson.outline,
    status=lesson.status,
    created_at=lesson.created_at,
    updated_at=lesson.updated_at,
    generated_content=lesson.generated_content,
    error_message=lesson.error_message,
  )


class PostgresLessonsRepository(LessonsRepository):
  """Persist lessons to Postgres using SQLAlchemy."""

  def __init__(self) -> None:
    self._session_factory = get_session_factory()
    if self._session_factory is None:
      raise RuntimeError("Database not initialized")

  async def create_lesson(self, *, lesson_id: str, title: str, outline: str) -> LessonRecord:
    """Insert a lesson record in the generating state."""
    async with self._session_factory() as session:
      lesson = Lesson(lesson_id=lesson_id, title=title, outline=outline, status=LessonStatus.GENERATING.value)
      session.add(lesson)
      await session.commit()
      # Reload server-side timestamps.
      await session.refresh(lesson)
      return _to_record(lesson)

  async def get_lesson(self, lesson_id: str) -> LessonRecord | None:
    """Fetch a lesson record by lesson identifier."""
    async with self._session_factory() as session:
      lesson = await session.get(Lesson, lesson_id)
      if lesson is None:
        return None
      return _to_record(lesson)

  async def list_lessons(self) -> list[LessonRecord]:
    """Return all lessons ordered newest first."""
    async with self._session_factory() as session:
      result = await session.execute(select(Lesson).order_by(Lesson.created_at.desc()))
      return [_to_record(lesson) for lesson in result.scalars().all()]

  async def mark_generated(self, lesson_id: str, *, title: str, generated_content: str) -> LessonRecord | None:
    """Apply the successful terminal update."""
    return await self._finish(lesson_id, status=LessonStatus.GENERATED, values={"title": title, "generated_content": generated_content, "error_message": None})

  async def mark_failed(self, lesson_id: str, *, error_message: str) -> LessonRecord | None:
    """Apply the failed terminal update."""
    return await self._finish(lesson_id, status=LessonStatus.FAILED, values={"error_message": error_message})

  async def list_stale_generating(self, older_than: datetime) -> list[LessonRecord]:
    """Return lessons that never left the generating state."""
    async with self._session_factory() as session:
      stmt = select(Lesson).where(Lesson.status == LessonStatus.GENERATING.value, Lesson.created_at < older_than).order_by(Lesson.created_at.asc())
      result = await session.execute(stmt)
      return [_to_record(lesson) for lesson in result.scalars().all()]

  async def _finish(self, lesson_id: str, *, status: LessonStatus, values: dict[str, str | None]) -> LessonRecord | None:
    """Transition a generating lesson to a terminal state exactly once."""
    async with self._session_factory() as session:
      # The status predicate makes the terminal write conditional, so a second completion is a no-op.
      stmt = update(Lesson).where(Lesson.lesson_id == lesson_id, Lesson.status == LessonStatus.GENERATING.value).values(status=status.value, **values).returning(Lesson)
      result = await session.execute(stmt)
      lesson = result.scalar_one_or_none()
      await session.commit()
      if lesson is None:
        logger.warning("Lesson %s was not in the generating state; skipped transition to %s.", lesson_id, status.value)
        return None
      return _to_record(lesson)
