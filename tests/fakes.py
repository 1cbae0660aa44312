"""In-memory collaborators shared by the unit tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta

from lessonforge.schema.lessons import LessonStatus
from lessonforge.storage.lessons_repo import LessonRecord
from lessonforge.telemetry.context import get_llm_call_context

TASK_SECRET = "test-task-secret"

VALID_COMPONENT = """"use client";
import { useState } from "react";

export default function LessonComponent() {
  const [open, setOpen] = useState(false);
  return (
    <div>
      <h1>Binary Search</h1>
      <button onClick={() => setOpen(!open)}>Toggle</button>
      {open ? <p>Halve the range each step.</p> : null}
    </div>
  );
}"""

EVAL_COMPONENT = """"use client";
import { useState } from "react";

export default function LessonComponent() {
  const [value] = useState(eval("1 + 1"));
  return (
    <div>{value}</div>
  );
}"""

NO_RETURN_COMPONENT = """"use client";
import { useState } from "react";

export default function LessonComponent() {
  const [value] = useState(0);
}"""


class ScriptedModel:
  """Model double that answers per agent from a script.

  Each agent owns a queue of responses; the last entry repeats once the queue
  is exhausted. Exception instances in the queue are raised instead of returned.
  """

  def __init__(self, script: dict[str, list[str | BaseException]] | None = None) -> None:
    self._script = {agent: list(items) for agent, items in (script or {}).items()}
    self.calls: list[tuple[str, str]] = []
    self.contexts = []

  async def complete(self, prompt: str) -> str:
    context = get_llm_call_context()
    agent = context.agent if context is not None else "-"
    self.calls.append((agent, prompt))
    self.contexts.append(context)
    queue = self._script.get(agent)
    if not queue:
      raise AssertionError(f"No scripted response for agent {agent}")
    item = queue.pop(0) if len(queue) > 1 else queue[0]
    if isinstance(item, BaseException):
      raise item
    return item

  def agents(self) -> list[str]:
    return [agent for agent, _ in self.calls]

  def count(self, agent: str) -> int:
    return sum(1 for called, _ in self.calls if called == agent)


class FakeLessonsRepository:
  """Dict-backed repository honouring the generating-only terminal transition."""

  def __init__(self) -> None:
    self.lessons: dict[str, LessonRecord] = {}
    self.fail_create = False
    self.transitions: list[tuple[str, str]] = []
    self._clock = datetime(2026, 1, 1, tzinfo=UTC)

  def _tick(self) -> datetime:
    self._clock = self._clock + timedelta(seconds=1)
    return self._clock

  def seed(self, *, lesson_id: str, status: str = LessonStatus.GENERATING.value, created_at: datetime | None = None, title: str = "Generating...", outline: str = "An outline") -> LessonRecord:
    stamp = created_at or self._tick()
    record = LessonRecord(lesson_id=lesson_id, title=title, outline=outline, status=status, created_at=stamp, updated_at=stamp)
    self.lessons[lesson_id] = record
    return record

  async def create_lesson(self, *, lesson_id: str, title: str, outline: str) -> LessonRecord:
    if self.fail_create:
      raise RuntimeError("database unavailable")
    return self.seed(lesson_id=lesson_id, title=title, outline=outline)

  async def get_lesson(self, lesson_id: str) -> LessonRecord | None:
    return self.lessons.get(lesson_id)

  async def list_lessons(self) -> list[LessonRecord]:
    return sorted(self.lessons.values(), key=lambda record: record.created_at, reverse=True)

  async def mark_generated(self, lesson_id: str, *, title: str, generated_content: str) -> LessonRecord | None:
    return self._finish(lesson_id, status=LessonStatus.GENERATED.value, title=title, generated_content=generated_content, error_message=None)

  async def mark_failed(self, lesson_id: str, *, error_message: str) -> LessonRecord | None:
    return self._finish(lesson_id, status=LessonStatus.FAILED.value, error_message=error_message)

  async def list_stale_generating(self, older_than: datetime) -> list[LessonRecord]:
    return [record for record in self.lessons.values() if record.status == LessonStatus.GENERATING.value and record.created_at < older_than]

  def _finish(self, lesson_id: str, *, status: str, **values: str | None) -> LessonRecord | None:
    record = self.lessons.get(lesson_id)
    if record is None or record.status != LessonStatus.GENERATING.value:
      return None
    updated = replace(record, status=status, updated_at=self._tick(), **values)
    self.lessons[lesson_id] = updated
    self.transitions.append((lesson_id, status))
    return updated


class RecordingEnqueuer:
  """Task enqueuer double that records calls and can be told to fail."""

  def __init__(self, *, error: Exception | None = None) -> None:
    self.calls: list[tuple[str, str]] = []
    self._error = error

  async def enqueue_lesson(self, lesson_id: str, outline: str) -> None:
    if self._error is not None:
      raise self._error
    self.calls.append((lesson_id, outline))
