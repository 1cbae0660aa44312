"""Tests for the lesson persistence bridge."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from lessonforge.ai.orchestrator import GenerationResult, LessonOrchestrator
from lessonforge.core.errors import InvalidOutlineError, LessonNotFoundError
from lessonforge.services.lessons import create_lesson, get_lesson, list_lessons, process_lesson_generation, validate_outline
from tests.fakes import VALID_COMPONENT, FakeLessonsRepository, ScriptedModel


def _orchestrator_returning(result: GenerationResult) -> MagicMock:
  orchestrator = MagicMock(spec=LessonOrchestrator)
  orchestrator.generate = AsyncMock(return_value=result)
  return orchestrator


@pytest.mark.parametrize("outline", ["", "   ", "\n\t", None, 42, ["outline"]])
def test_validate_outline_rejects_missing_or_blank(outline) -> None:
  with pytest.raises(InvalidOutlineError, match="Lesson outline is required"):
    validate_outline(outline)


def test_validate_outline_trims() -> None:
  assert validate_outline("  binary search  ") == "binary search"


@pytest.mark.anyio
async def test_create_lesson_starts_generating_with_placeholder(fake_repo: FakeLessonsRepository) -> None:
  record = await create_lesson(fake_repo, "  binary search ")

  assert record.status == "generating"
  assert record.title == "Generating..."
  assert record.outline == "binary search"
  assert record.generated_content is None
  assert fake_repo.lessons[record.lesson_id] == record


@pytest.mark.anyio
async def test_successful_generation_marks_generated(fake_repo: FakeLessonsRepository) -> None:
  record = await create_lesson(fake_repo, "binary search")
  orchestrator = _orchestrator_returning(GenerationResult.succeeded(title="Binary Search", code=VALID_COMPONENT, attempts=1))

  updated = await process_lesson_generation(fake_repo, orchestrator, record.lesson_id, record.outline)

  assert updated is not None
  assert updated.status == "generated"
  assert updated.title == "Binary Search"
  assert updated.generated_content == VALID_COMPONENT
  assert updated.error_message is None
  orchestrator.generate.assert_awaited_once_with("binary search", lesson_id=record.lesson_id)


@pytest.mark.anyio
async def test_failed_generation_marks_failed(fake_repo: FakeLessonsRepository) -> None:
  record = await create_lesson(fake_repo, "binary search")
  orchestrator = _orchestrator_returning(GenerationResult.failed(error="Code validation failed after 3 attempts: Unbalanced braces", attempts=3))

  updated = await process_lesson_generation(fake_repo, orchestrator, record.lesson_id, record.outline)

  assert updated is not None
  assert updated.status == "failed"
  assert updated.error_message == "Code validation failed after 3 attempts: Unbalanced braces"
  assert updated.generated_content is None


@pytest.mark.anyio
async def test_orchestrator_crash_still_reaches_failed(fake_repo: FakeLessonsRepository) -> None:
  record = await create_lesson(fake_repo, "binary search")
  orchestrator = MagicMock(spec=LessonOrchestrator)
  orchestrator.generate = AsyncMock(side_effect=RuntimeError("boom"))

  updated = await process_lesson_generation(fake_repo, orchestrator, record.lesson_id, record.outline)

  assert updated is not None
  assert updated.status == "failed"
  assert updated.error_message == "boom"


@pytest.mark.anyio
async def test_terminal_update_is_applied_once(fake_repo: FakeLessonsRepository) -> None:
  record = await create_lesson(fake_repo, "binary search")
  success = _orchestrator_returning(GenerationResult.succeeded(title="Binary Search", code=VALID_COMPONENT, attempts=1))
  failure = _orchestrator_returning(GenerationResult.failed(error="late failure", attempts=3))

  await process_lesson_generation(fake_repo, success, record.lesson_id, record.outline)
  second = await process_lesson_generation(fake_repo, failure, record.lesson_id, record.outline)

  assert second is None
  assert fake_repo.lessons[record.lesson_id].status == "generated"
  assert fake_repo.transitions == [(record.lesson_id, "generated")]


@pytest.mark.anyio
async def test_end_to_end_with_scripted_model(fake_repo: FakeLessonsRepository) -> None:
  record = await create_lesson(fake_repo, "A 10-minute lesson on binary search")
  model = ScriptedModel({"TitleExtractor": ["Binary Search in 10 Minutes"], "ComponentBuilder": [VALID_COMPONENT]})

  updated = await process_lesson_generation(fake_repo, LessonOrchestrator(model), record.lesson_id, record.outline)

  assert updated is not None
  assert updated.status == "generated"
  assert updated.generated_content.startswith('"use client";')
  assert "export default function" in updated.generated_content
  assert "```" not in updated.generated_content


@pytest.mark.anyio
async def test_get_lesson_raises_when_missing(fake_repo: FakeLessonsRepository) -> None:
  with pytest.raises(LessonNotFoundError):
    await get_lesson(fake_repo, "missing")


@pytest.mark.anyio
async def test_list_lessons_newest_first(fake_repo: FakeLessonsRepository) -> None:
  first = await create_lesson(fake_repo, "first")
  second = await create_lesson(fake_repo, "second")

  records = await list_lessons(fake_repo)

  assert [record.lesson_id for record in records] == [second.lesson_id, first.lesson_id]
