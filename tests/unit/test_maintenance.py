"""Tests for stale lesson reconciliation."""

from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from lessonforge.services.maintenance import RECONCILIATION_ERROR, reconcile_stale_lessons, run_reconciliation_loop
from tests.fakes import FakeLessonsRepository


@pytest.mark.anyio
async def test_stale_generating_lessons_are_failed(fake_repo: FakeLessonsRepository) -> None:
  now = datetime.now(UTC)
  fake_repo.seed(lesson_id="stale", created_at=now - timedelta(hours=2))
  fake_repo.seed(lesson_id="fresh", created_at=now)
  fake_repo.seed(lesson_id="done", status="generated", created_at=now - timedelta(hours=3))

  reconciled = await reconcile_stale_lessons(fake_repo, 1800)

  assert reconciled == 1
  assert fake_repo.lessons["stale"].status == "failed"
  assert fake_repo.lessons["stale"].error_message == RECONCILIATION_ERROR
  assert fake_repo.lessons["fresh"].status == "generating"
  assert fake_repo.lessons["done"].status == "generated"


@pytest.mark.anyio
async def test_nothing_to_reconcile(fake_repo: FakeLessonsRepository) -> None:
  assert await reconcile_stale_lessons(fake_repo, 60) == 0


@pytest.mark.anyio
async def test_max_age_must_be_positive(fake_repo: FakeLessonsRepository) -> None:
  with pytest.raises(ValueError):
    await reconcile_stale_lessons(fake_repo, 0)


class _FlakyRepository(FakeLessonsRepository):
  """Fails the first stale lookup to mimic a brief database outage."""

  def __init__(self) -> None:
    super().__init__()
    self.lookups = 0

  async def list_stale_generating(self, older_than: datetime):
    self.lookups += 1
    if self.lookups == 1:
      raise ConnectionError("database restarting")
    return await super().list_stale_generating(older_than)


async def _wait_for_status(repo: FakeLessonsRepository, lesson_id: str, status: str) -> None:
  for _ in range(200):
    if repo.lessons[lesson_id].status == status:
      return
    await asyncio.sleep(0.01)
  raise AssertionError(f"{lesson_id} never reached {status}")


@pytest.mark.anyio
async def test_reconciliation_loop_fails_lessons_that_age_after_startup() -> None:
  repo = _FlakyRepository()
  repo.seed(lesson_id="orphan", created_at=datetime.now(UTC))
  task = asyncio.create_task(run_reconciliation_loop(repo, 60, 0.01))
  try:
    # The orphan is fresh at first; sweeps keep running through the failed lookup.
    await asyncio.sleep(0.1)
    assert repo.lookups >= 2
    assert repo.lessons["orphan"].status == "generating"

    repo.lessons["orphan"] = replace(repo.lessons["orphan"], created_at=datetime.now(UTC) - timedelta(minutes=5))
    await _wait_for_status(repo, "orphan", "failed")
    assert repo.lessons["orphan"].error_message == RECONCILIATION_ERROR
  finally:
    task.cancel()
    with suppress(asyncio.CancelledError):
      await task


@pytest.mark.anyio
async def test_reconciliation_interval_must_be_positive(fake_repo: FakeLessonsRepository) -> None:
  with pytest.raises(ValueError):
    await run_reconciliation_loop(fake_repo, 60, 0)
