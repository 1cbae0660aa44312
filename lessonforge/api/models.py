from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lessonforge.storage.lessons_repo import LessonRecord


class GenerateLessonRequest(BaseModel):
  """Request body for lesson generation.

  The outline is typed loosely so missing, non-string and blank values all
  surface as the same client error from the service layer.
  """

  outline: Any = Field(default=None, description="Natural-language outline of the lesson to generate.", examples=["A 10-minute lesson on binary search"])
  model_config = ConfigDict(extra="ignore")


class LessonOut(BaseModel):
  """Public representation of a stored lesson."""

  id: str
  title: str
  outline: str
  status: str
  generated_content: str | None = None
  error_message: str | None = None
  created_at: datetime
  updated_at: datetime

  @classmethod
  def from_record(cls, record: LessonRecord) -> LessonOut:
    return cls(
      id=record.lesson_id,
      title=record.title,
      outline=record.outline,
      status=record.status,
      generated_content=record.generated_content,
      error_message=record.error_message,
      created_at=record.created_at,
      updated_at=record.updated_at,
    )


class LessonResponse(BaseModel):
  lesson: LessonOut


class LessonListResponse(BaseModel):
  lessons: list[LessonOut]


class LessonGenerationTask(BaseModel):
  """Payload posted to the worker endpoint by the HTTP task dispatcher."""

  lesson_id: str = Field(min_length=1)
  outline: str = Field(min_length=1)


class ReconcileResponse(BaseModel):
  reconciled: int
