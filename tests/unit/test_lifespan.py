"""Tests for startup and shutdown hooks."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock, patch

import pytest

from lessonforge.config import get_settings
from lessonforge.core.lifespan import _redact_dsn, lifespan
from lessonforge.main import app
from lessonforge.services.maintenance import RECONCILIATION_ERROR
from tests.fakes import FakeLessonsRepository


@pytest.mark.anyio
async def test_startup_reconciles_stale_lessons_and_shutdown_disposes(fake_repo: FakeLessonsRepository) -> None:
  fake_repo.seed(lesson_id="stuck", created_at=datetime.now(UTC) - timedelta(hours=1))
  settings = replace(get_settings(), pg_dsn="postgresql://lessons@localhost/lessons", auto_create_tables=True, stale_lesson_seconds=60, reconcile_interval_seconds=3600)

  with (
    patch("lessonforge.config.get_settings", return_value=settings),
    patch("lessonforge.core.lifespan._initialize_logging", Mock()),
    patch("lessonforge.core.lifespan._get_repo", return_value=fake_repo),
    patch("lessonforge.core.lifespan.create_tables", new_callable=AsyncMock) as create_tables,
    patch("lessonforge.core.lifespan.dispose_engine", new_callable=AsyncMock) as dispose_engine,
  ):
    async with lifespan(app):
      assert fake_repo.lessons["stuck"].status == "failed"
      assert fake_repo.lessons["stuck"].error_message == RECONCILIATION_ERROR
      sweeper = app.state.reconciliation_task
      assert sweeper is not None
      assert not sweeper.done()

  create_tables.assert_awaited_once()
  dispose_engine.assert_awaited_once()
  # Shutdown stops the periodic sweep.
  assert sweeper.cancelled()


@pytest.mark.anyio
async def test_startup_survives_database_errors() -> None:
  settings = replace(get_settings(), pg_dsn="postgresql://lessons@localhost/lessons", auto_create_tables=False)

  with (
    patch("lessonforge.config.get_settings", return_value=settings),
    patch("lessonforge.core.lifespan._initialize_logging", Mock()),
    patch("lessonforge.core.lifespan._get_repo", side_effect=RuntimeError("Database not initialized")),
    patch("lessonforge.core.lifespan.dispose_engine", new_callable=AsyncMock),
  ):
    async with lifespan(app):
      assert app.state.reconciliation_task is None


def test_redact_dsn_hides_password() -> None:
  assert _redact_dsn("postgresql://lessons:hunter2@db:5432/lessons") == "postgresql://lessons@db:5432/lessons"
  assert _redact_dsn(None) == "<unset>"
