from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status

from lessonforge.api.deps import get_enqueuer
from lessonforge.api.models import GenerateLessonRequest, LessonListResponse, LessonOut, LessonResponse
from lessonforge.services.lessons import create_lesson, get_lesson, list_lessons, validate_outline
from lessonforge.services.tasks.interface import TaskEnqueuer
from lessonforge.storage.factory import get_lessons_repo
from lessonforge.storage.lessons_repo import LessonsRepository

router = APIRouter()
logger = logging.getLogger(__name__)

DISPATCH_FAILED_ERROR = "Failed to dispatch lesson generation."


@router.post("/generate", response_model=LessonResponse)
async def generate_lesson(  # noqa: B008
  request: GenerateLessonRequest | None = Body(default=None),  # noqa: B008
  repo: LessonsRepository = Depends(get_lessons_repo),  # noqa: B008
  enqueuer: TaskEnqueuer = Depends(get_enqueuer),  # noqa: B008
) -> LessonResponse:
  """Create a lesson in the generating state and start generation in the background."""
  # Reject bad outlines before any record exists or any model is called.
  outline = validate_outline(request.outline if request is not None else None)

  try:
    record = await create_lesson(repo, outline)
  except Exception as exc:
    logger.error("Failed to create lesson record: %s", exc, exc_info=True)
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create lesson") from exc

  try:
    await enqueuer.enqueue_lesson(record.lesson_id, record.outline)
  except Exception:  # noqa: BLE001
    logger.error("Failed to enqueue generation for lesson %s.", record.lesson_id, exc_info=True)
    # Leave a terminal record so the client stops polling.
    failed = await repo.mark_failed(record.lesson_id, error_message=DISPATCH_FAILED_ERROR)
    record = failed or record

  return LessonResponse(lesson=LessonOut.from_record(record))


@router.get("/{lesson_id}", response_model=LessonResponse)
async def get_lesson_endpoint(lesson_id: str, repo: LessonsRepository = Depends(get_lessons_repo)) -> LessonResponse:  # noqa: B008
  """Fetch a single lesson for polling."""
  record = await get_lesson(repo, lesson_id)
  return LessonResponse(lesson=LessonOut.from_record(record))


@router.get("", response_model=LessonListResponse)
async def list_lessons_endpoint(repo: LessonsRepository = Depends(get_lessons_repo)) -> LessonListResponse:  # noqa: B008
  """List every lesson, newest first."""
  records = await list_lessons(repo)
  return LessonListResponse(lessons=[LessonOut.from_record(record) for record in records])
