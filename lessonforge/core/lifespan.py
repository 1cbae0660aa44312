import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from urllib.parse import urlparse

from fastapi import FastAPI

from lessonforge.core.database import create_tables, dispose_engine
from lessonforge.core.logging import _initialize_logging
from lessonforge.services.maintenance import reconcile_stale_lessons, run_reconciliation_loop
from lessonforge.services.tasks.factory import get_inprocess_runner
from lessonforge.storage.factory import _get_repo

_SHUTDOWN_DRAIN_SECONDS = 30.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Initialise logging and storage on startup; drain background work on shutdown."""
  from lessonforge.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("lessonforge.core.lifespan")

  _initialize_logging(settings)
  logger.info("Startup complete - logging verified.")
  reconciliation_task: asyncio.Task[None] | None = None

  if settings.pg_dsn:
    logger.info("Database configured; LESSONFORGE_PG_DSN=%s", _redact_dsn(settings.pg_dsn))
    try:
      if settings.auto_create_tables:
        await create_tables()
        logger.info("Lesson tables ensured from metadata.")
      # Records left generating by a previous process can never finish now.
      repo = _get_repo(settings)
      reconciled = await reconcile_stale_lessons(repo, settings.stale_lesson_seconds)
      logger.info("Startup reconciliation moved %s lesson(s) to failed.", reconciled)
      # Records orphaned by a restart only become stale later, so keep sweeping.
      reconciliation_task = asyncio.create_task(run_reconciliation_loop(repo, settings.stale_lesson_seconds, settings.reconcile_interval_seconds))
    except Exception:  # noqa: BLE001
      logger.warning("Startup database tasks failed; continuing without them.", exc_info=True)
  else:
    logger.warning("LESSONFORGE_PG_DSN is not set; lesson endpoints will fail until it is configured.")

  app.state.reconciliation_task = reconciliation_task
  yield

  if reconciliation_task is not None:
    reconciliation_task.cancel()
    with suppress(asyncio.CancelledError):
      await reconciliation_task
  await get_inprocess_runner().drain(timeout=_SHUTDOWN_DRAIN_SECONDS)
  await dispose_engine()
  logger.info("Shutdown complete.")


def _redact_dsn(raw: str | None) -> str:
  """Redact credentials from a DSN while keeping host/db visible."""
  if not raw:
    return "<unset>"

  parsed = urlparse(raw)
  if not parsed.scheme:
    return "<invalid>"

  user = parsed.username or ""
  host = parsed.hostname or ""
  port = f":{parsed.port}" if parsed.port else ""
  netloc = f"{user}@{host}{port}" if user else f"{host}{port}"
  database = parsed.path.lstrip("/")
  path = f"/{database}" if database else ""
  return f"{parsed.scheme}://{netloc}{path}"
