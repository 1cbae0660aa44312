"""Maintenance services for lessons abandoned mid-generation."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta

from lessonforge.storage.lessons_repo import LessonsRepository

RECONCILIATION_ERROR = "Generation did not complete before the reconciliation deadline."

logger = logging.getLogger(__name__)


async def reconcile_stale_lessons(repo: LessonsRepository, max_age_seconds: int) -> int:
  """Fail lessons still generating after max_age_seconds and return how many moved.

  A worker that died mid-run leaves its lesson in the generating state forever;
  this job gives such records a terminal state so clients stop polling.
  """
  if max_age_seconds <= 0:
    raise ValueError("max_age_seconds must be a positive integer.")

  cutoff = datetime.now(UTC) - timedelta(seconds=max_age_seconds)
  stale = await repo.list_stale_generating(cutoff)
  reconciled = 0
  for record in stale:
    # A lesson that finished between the query and this write is left untouched.
    updated = await repo.mark_failed(record.lesson_id, error_message=RECONCILIATION_ERROR)
    if updated is not None:
      reconciled += 1

  if reconciled:
    logger.warning("Reconciled %s stale lesson(s) older than %s.", reconciled, cutoff.isoformat())
  return reconciled


async def run_reconciliation_loop(repo: LessonsRepository, max_age_seconds: int, interval_seconds: float) -> None:
  """Reconcile stale lessons every interval_seconds until cancelled."""
  if interval_seconds <= 0:
    raise ValueError("interval_seconds must be positive.")

  while True:
    await asyncio.sleep(interval_seconds)
    try:
      await reconcile_stale_lessons(repo, max_age_seconds)
    except Exception:  # noqa: BLE001
      # A transient database outage must not end the loop.
      logger.warning("Periodic reconciliation failed; retrying in %ss.", interval_seconds, exc_info=True)
