from __future__ import annotations

import logging
from urllib.parse import urlparse

import httpx

from lessonforge.config import Settings
from lessonforge.services.tasks.interface import TaskEnqueuer

logger = logging.getLogger(__name__)

_DISPATCH_TIMEOUT_SECONDS = 30.0


class LocalHttpEnqueuer(TaskEnqueuer):
  """Enqueues lesson generation by POSTing to the worker endpoint."""

  def __init__(self, settings: Settings) -> None:
    self.settings = settings

  def _should_use_asgi_transport(self, base_url: str) -> bool:
    """Decide if we should route requests in-process via ASGITransport."""
    # Avoid network/proxy edge-cases for local development by calling the app in-process when possible.
    parsed = urlparse(base_url)
    hostname = (parsed.hostname or "").lower()
    return hostname in {"localhost", "127.0.0.1", "::1", "0.0.0.0"}

  def _build_client(self, base_url: str) -> httpx.AsyncClient:
    """Build an httpx client for task dispatch."""
    # Never trust environment proxy variables for internal task dispatch.
    if self._should_use_asgi_transport(base_url):
      from lessonforge.main import app

      transport = httpx.ASGITransport(app=app)
      return httpx.AsyncClient(transport=transport, base_url=base_url, trust_env=False)
    return httpx.AsyncClient(trust_env=False)

  def _task_headers(self) -> dict[str, str]:
    """Build task authentication headers for internal endpoints."""
    if not self.settings.task_secret:
      raise RuntimeError("Task secret not configured.")
    return {"authorization": f"Bearer {self.settings.task_secret}"}

  async def enqueue_lesson(self, lesson_id: str, outline: str) -> None:
    """Hand a lesson to the worker endpoint, which accepts it and runs it detached."""
    if not self.settings.base_url:
      raise RuntimeError("Base URL not configured, strictly required for LocalHttpEnqueuer.")

    url = f"{self.settings.base_url.rstrip('/')}/worker/process-lesson"
    payload = {"lesson_id": lesson_id, "outline": outline}

    try:
      async with self._build_client(self.settings.base_url) as client:
        logger.info("Dispatching lesson task to %s", url)
        response = await client.post(url, json=payload, headers=self._task_headers(), timeout=_DISPATCH_TIMEOUT_SECONDS)
        response.raise_for_status()

    except httpx.HTTPStatusError as e:
      logger.error("Lesson task dispatch returned %s for lesson %s: %s", e.response.status_code, lesson_id, e.response.text)
      raise
    except httpx.RequestError as e:
      logger.error("Failed to dispatch lesson task for lesson %s: %s", lesson_id, e)
      raise
