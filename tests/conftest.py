"""Test configuration and shared fixtures."""

from __future__ import annotations

from dataclasses import replace

import pytest
from httpx import ASGITransport, AsyncClient

from lessonforge.api.deps import get_enqueuer, get_runner
from lessonforge.config import get_settings
from lessonforge.main import app
from lessonforge.storage.factory import get_lessons_repo
from tests.fakes import TASK_SECRET, FakeLessonsRepository, RecordingEnqueuer


@pytest.fixture
def anyio_backend() -> str:
  return "asyncio"


@pytest.fixture
def fake_repo() -> FakeLessonsRepository:
  return FakeLessonsRepository()


@pytest.fixture
def recording_enqueuer() -> RecordingEnqueuer:
  return RecordingEnqueuer()


@pytest.fixture
def recording_runner() -> RecordingEnqueuer:
  return RecordingEnqueuer()


@pytest.fixture
async def async_client(fake_repo, recording_enqueuer, recording_runner):
  settings = replace(get_settings(), task_secret=TASK_SECRET, stale_lesson_seconds=60)
  app.dependency_overrides[get_lessons_repo] = lambda: fake_repo
  app.dependency_overrides[get_enqueuer] = lambda: recording_enqueuer
  app.dependency_overrides[get_runner] = lambda: recording_runner
  app.dependency_overrides[get_settings] = lambda: settings
  async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
    yield client
  app.dependency_overrides.clear()
