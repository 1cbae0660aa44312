"""Lesson lifecycle services bridging the orchestrator and storage."""

from __future__ import annotations

import logging
from typing import Any

from lessonforge.ai.agents.prompts import PLACEHOLDER_TITLE
from lessonforge.ai.orchestrator import UNKNOWN_ERROR, LessonOrchestrator
from lessonforge.ai.providers import get_model
from lessonforge.config import Settings
from lessonforge.core.errors import InvalidOutlineError, LessonNotFoundError
from lessonforge.storage.lessons_repo import LessonRecord, LessonsRepository
from lessonforge.utils.ids import generate_lesson_id

logger = logging.getLogger(__name__)


def build_orchestrator(settings: Settings) -> LessonOrchestrator:
  """Create an orchestrator wired to the configured model provider."""
  return LessonOrchestrator(get_model(settings), max_retries=settings.max_retries)


def validate_outline(outline: Any) -> str:
  """Return the trimmed outline or raise when it is missing or blank."""
  if not isinstance(outline, str) or not outline.strip():
    raise InvalidOutlineError()
  return outline.strip()


async def create_lesson(repo: LessonsRepository, outline: str) -> LessonRecord:
  """Persist a new lesson in the generating state."""
  cleaned = validate_outline(outline)
  lesson_id = generate_lesson_id()
  record = await repo.create_lesson(lesson_id=lesson_id, title=PLACEHOLDER_TITLE, outline=cleaned)
  logger.info("Created lesson %s in generating state.", lesson_id)
  return record


async def process_lesson_generation(repo: LessonsRepository, orchestrator: LessonOrchestrator, lesson_id: str, outline: str) -> LessonRecord | None:
  """Run generation for a stored lesson and apply its single terminal update.

  The record always leaves the generating state: orchestrator failures become a
  failed record, and a crash around the orchestrator is stored as a failure too.
  Returns None when the lesson had already reached a terminal state.
  """
  logger.info("Starting generation for lesson %s.", lesson_id)
  try:
    result = await orchestrator.generate(outline, lesson_id=lesson_id)
  except Exception as exc:  # noqa: BLE001
    logger.error("Generation crashed for lesson %s.", lesson_id, exc_info=True)
    return await repo.mark_failed(lesson_id, error_message=str(exc) or UNKNOWN_ERROR)

  if result.success and result.title is not None and result.code is not None:
    logger.info("Lesson %s generated after %s attempt(s).", lesson_id, result.attempts)
    return await repo.mark_generated(lesson_id, title=result.title, generated_content=result.code)

  logger.warning("Lesson %s failed after %s attempt(s): %s", lesson_id, result.attempts, result.error)
  return await repo.mark_failed(lesson_id, error_message=result.error or UNKNOWN_ERROR)


async def get_lesson(repo: LessonsRepository, lesson_id: str) -> LessonRecord:
  """Fetch a lesson or raise when it does not exist."""
  record = await repo.get_lesson(lesson_id)
  if record is None:
    raise LessonNotFoundError(lesson_id)
  return record


async def list_lessons(repo: LessonsRepository) -> list[LessonRecord]:
  """Return every lesson, newest first."""
  return await repo.list_lessons()
