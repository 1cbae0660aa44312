from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from lessonforge.api.deps import verify_task_secret
from lessonforge.api.models import ReconcileResponse
from lessonforge.config import Settings, get_settings
from lessonforge.services.maintenance import reconcile_stale_lessons
from lessonforge.storage.factory import get_lessons_repo
from lessonforge.storage.lessons_repo import LessonsRepository

router = APIRouter(prefix="/maintenance", tags=["tasks"], dependencies=[Depends(verify_task_secret)])
logger = logging.getLogger(__name__)


@router.post("/reconcile", response_model=ReconcileResponse, status_code=status.HTTP_200_OK)
async def reconcile_endpoint(settings: Settings = Depends(get_settings), repo: LessonsRepository = Depends(get_lessons_repo)) -> ReconcileResponse:  # noqa: B008
  """Fail lessons that have been generating longer than the configured deadline."""
  reconciled = await reconcile_stale_lessons(repo, settings.stale_lesson_seconds)
  logger.info("Maintenance reconcile moved %s lesson(s) to failed.", reconciled)
  return ReconcileResponse(reconciled=reconciled)
