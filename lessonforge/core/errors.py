"""Domain errors raised by the lesson services."""

from __future__ import annotations


class InputError(ValueError):
  """Raised when client-supplied input is unusable."""


class InvalidOutlineError(InputError):
  """Raised when a lesson outline is missing or blank."""

  def __init__(self, message: str = "Lesson outline is required") -> None:
    super().__init__(message)


class LessonNotFoundError(LookupError):
  """Raised when a lesson id does not resolve to a stored record."""

  def __init__(self, lesson_id: str) -> None:
    super().__init__(f"Lesson not found: {lesson_id}")
    self.lesson_id = lesson_id
