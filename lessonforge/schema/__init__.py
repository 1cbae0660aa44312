"""Database models."""

from lessonforge.schema.lessons import Lesson, LessonStatus

__all__ = ["Lesson", "LessonStatus"]
