from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from lessonforge.ai.orchestrator import LessonOrchestrator
from lessonforge.services.lessons import process_lesson_generation
from lessonforge.services.tasks.interface import TaskEnqueuer
from lessonforge.storage.lessons_repo import LessonsRepository

logger = logging.getLogger(__name__)

RepoFactory = Callable[[], LessonsRepository]
OrchestratorFactory = Callable[[], LessonOrchestrator]


class InProcessEnqueuer(TaskEnqueuer):
  """Runs lesson generation as asyncio tasks owned by this process."""

  def __init__(self, *, repo_factory: RepoFactory, orchestrator_factory: OrchestratorFactory) -> None:
    self._repo_factory = repo_factory
    self._orchestrator_factory = orchestrator_factory
    # The event loop only keeps weak references to tasks.
    self._tasks: set[asyncio.Task[None]] = set()

  @property
  def pending(self) -> int:
    return len(self._tasks)

  async def enqueue_lesson(self, lesson_id: str, outline: str) -> None:
    """Schedule generation for a lesson and return immediately."""
    task = asyncio.create_task(self._run(lesson_id, outline), name=f"lesson-generation:{lesson_id}")
    self._tasks.add(task)
    task.add_done_callback(self._on_done)
    logger.info("Scheduled in-process generation for lesson %s (pending=%s).", lesson_id, len(self._tasks))

  async def _run(self, lesson_id: str, outline: str) -> None:
    repo = self._repo_factory()
    orchestrator = self._orchestrator_factory()
    await process_lesson_generation(repo, orchestrator, lesson_id, outline)

  def _on_done(self, task: asyncio.Task[None]) -> None:
    self._tasks.discard(task)
    if task.cancelled():
      logger.warning("Generation task %s was cancelled.", task.get_name())
      return
    exc = task.exception()
    if exc is not None:
      logger.error("Generation task %s crashed.", task.get_name(), exc_info=(type(exc), exc, exc.__traceback__))

  async def drain(self, timeout: float | None = None) -> None:
    """Wait for running generations, cancelling whatever outlives the timeout."""
    if not self._tasks:
      return
    logger.info("Draining %s generation task(s).", len(self._tasks))
    _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)
    for task in still_running:
      task.cancel()
    if still_running:
      await asyncio.gather(*still_running, return_exceptions=True)
      logger.warning("Cancelled %s generation task(s) at shutdown.", len(still_running))
