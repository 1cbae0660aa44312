"""Shared FastAPI dependencies for task authentication and service wiring."""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, Header, HTTPException, status

from lessonforge.config import Settings, get_settings
from lessonforge.services.tasks.factory import get_inprocess_runner, get_task_enqueuer
from lessonforge.services.tasks.inprocess import InProcessEnqueuer
from lessonforge.services.tasks.interface import TaskEnqueuer

logger = logging.getLogger(__name__)


def verify_task_secret(settings: Settings = Depends(get_settings), authorization: str | None = Header(default=None)) -> None:  # noqa: B008
  """Reject internal task calls that do not carry the shared task secret."""
  # Secure-by-default: internal task endpoints must be authenticated to avoid arbitrary job execution.
  if not settings.task_secret:
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Task authentication is not configured.")
  expected_auth = f"Bearer {settings.task_secret}"
  if not secrets.compare_digest((authorization or ""), expected_auth):
    logger.warning("Unauthorized access attempt to an internal task endpoint")
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid task secret.")


def get_enqueuer(settings: Settings = Depends(get_settings)) -> TaskEnqueuer:  # noqa: B008
  """Resolve the configured task enqueuer."""
  return get_task_enqueuer(settings)


def get_runner() -> InProcessEnqueuer:
  """Resolve the in-process runner that executes accepted worker tasks."""
  return get_inprocess_runner()
