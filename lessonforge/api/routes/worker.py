from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from lessonforge.api.deps import get_runner, verify_task_secret
from lessonforge.api.models import LessonGenerationTask
from lessonforge.services.tasks.inprocess import InProcessEnqueuer
from lessonforge.storage.factory import get_lessons_repo
from lessonforge.storage.lessons_repo import LessonsRepository

router = APIRouter(dependencies=[Depends(verify_task_secret)])
logger = logging.getLogger(__name__)


@router.post("/process-lesson", status_code=status.HTTP_202_ACCEPTED)
async def process_lesson_endpoint(
  task: LessonGenerationTask,
  repo: LessonsRepository = Depends(get_lessons_repo),  # noqa: B008
  runner: InProcessEnqueuer = Depends(get_runner),  # noqa: B008
) -> dict[str, str]:
  """Worker endpoint that accepts a lesson and runs its generation detached."""
  logger.info("Received lesson generation task for lesson %s", task.lesson_id)

  lesson = await repo.get_lesson(task.lesson_id)
  if lesson is None:
    logger.error("Lesson %s not found during worker processing.", task.lesson_id)
    return {"status": "lesson_not_found"}

  # Idempotency check
  if lesson.status != "generating":
    logger.info("Lesson %s is already %s. Skipping.", task.lesson_id, lesson.status)
    return {"status": "skipped"}

  await runner.enqueue_lesson(task.lesson_id, task.outline)
  return {"status": "accepted"}
