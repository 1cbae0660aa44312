from lessonforge.config import Settings
from lessonforge.storage.lessons_repo import LessonsRepository
from lessonforge.storage.postgres_lessons_repo import PostgresLessonsRepository


def _get_repo(settings: Settings) -> LessonsRepository:
  """Return the active lessons repository."""

  # Enforce Postgres-backed storage for lessons.

  if not settings.pg_dsn:
    raise ValueError("LESSONFORGE_PG_DSN must be set to enable Postgres persistence.")

  return PostgresLessonsRepository()


def get_lessons_repo() -> LessonsRepository:
  """FastAPI dependency resolving the lessons repository from settings."""
  from lessonforge.config import get_settings

  return _get_repo(get_settings())
