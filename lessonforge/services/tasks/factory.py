from __future__ import annotations

from functools import lru_cache

from lessonforge.config import Settings, get_settings
from lessonforge.services.lessons import build_orchestrator
from lessonforge.services.tasks.inprocess import InProcessEnqueuer
from lessonforge.services.tasks.interface import TaskEnqueuer
from lessonforge.services.tasks.local import LocalHttpEnqueuer
from lessonforge.storage.factory import _get_repo


@lru_cache(maxsize=1)
def get_inprocess_runner() -> InProcessEnqueuer:
  """Return the process-wide runner that owns detached generation tasks."""
  settings = get_settings()
  return InProcessEnqueuer(repo_factory=lambda: _get_repo(settings), orchestrator_factory=lambda: build_orchestrator(settings))


def get_task_enqueuer(settings: Settings) -> TaskEnqueuer:
  """Factory to get the configured task enqueuer."""
  if settings.task_service_provider == "local-http":
    return LocalHttpEnqueuer(settings)
  return get_inprocess_runner()
