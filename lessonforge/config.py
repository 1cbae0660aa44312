"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from lessonforge.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

_SUPPORTED_PROVIDERS = {"gemini", "openrouter"}
_SUPPORTED_TASK_PROVIDERS = {"inprocess", "local-http"}


@dataclass(frozen=True)
class Settings:
  """Typed settings for the LessonForge service."""

  environment: str
  allowed_origins: tuple[str, ...]
  debug: bool
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  pg_dsn: str | None
  pg_connect_timeout: int
  auto_create_tables: bool
  model_provider: str
  model_name: str | None
  gemini_api_key: str | None
  openrouter_api_key: str | None
  max_retries: int
  task_service_provider: str
  base_url: str | None
  task_secret: str | None
  stale_lesson_seconds: int
  reconcile_interval_seconds: int


@dataclass(frozen=True)
class DatabaseSettings:
  """Typed settings for database connectivity."""

  debug: bool
  pg_dsn: str | None
  pg_connect_timeout: int


def _parse_origins(raw: str | None) -> tuple[str, ...]:
  # Local development talks to the Next-style client on port 3000 by default.
  if not raw:
    return ("http://localhost:3000",)

  origins = [origin.strip() for origin in raw.split(",") if origin.strip()]

  if not origins:
    raise ValueError("LESSONFORGE_ALLOWED_ORIGINS must include at least one origin.")

  if "*" in origins:
    raise ValueError("LESSONFORGE_ALLOWED_ORIGINS must not include wildcard origins.")

  return tuple(origins)


def _parse_bool(raw: str | None) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None:
    return False

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _parse_positive_int(name: str, default: str) -> int:
  value = int(os.getenv(name, default))
  if value <= 0:
    raise ValueError(f"{name} must be a positive integer.")
  return value


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("LESSONFORGE_ENV", "development").lower()
  debug = _parse_bool(os.getenv("LESSONFORGE_DEBUG"))

  log_max_bytes = _parse_positive_int("LESSONFORGE_LOG_MAX_BYTES", "5242880")  # 5MB default
  log_backup_count = int(os.getenv("LESSONFORGE_LOG_BACKUP_COUNT", "10"))
  if log_backup_count < 0:
    raise ValueError("LESSONFORGE_LOG_BACKUP_COUNT must be zero or a positive integer.")

  model_provider = (os.getenv("LESSONFORGE_MODEL_PROVIDER") or "gemini").strip().lower()
  if model_provider not in _SUPPORTED_PROVIDERS:
    raise ValueError(f"LESSONFORGE_MODEL_PROVIDER must be one of: {', '.join(sorted(_SUPPORTED_PROVIDERS))}.")

  task_service_provider = (os.getenv("LESSONFORGE_TASK_SERVICE_PROVIDER") or "inprocess").strip().lower()
  if task_service_provider not in _SUPPORTED_TASK_PROVIDERS:
    raise ValueError(f"LESSONFORGE_TASK_SERVICE_PROVIDER must be one of: {', '.join(sorted(_SUPPORTED_TASK_PROVIDERS))}.")

  # The outer retry ceiling bounds model spend per lesson.
  max_retries = _parse_positive_int("LESSONFORGE_MAX_RETRIES", "3")

  return Settings(
    environment=environment,
    allowed_origins=_parse_origins(os.getenv("LESSONFORGE_ALLOWED_ORIGINS")),
    debug=debug,
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    log_http_4xx=_parse_bool(os.getenv("LESSONFORGE_LOG_HTTP_4XX")),
    pg_dsn=_optional_str(os.getenv("LESSONFORGE_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL")),
    pg_connect_timeout=_parse_positive_int("LESSONFORGE_PG_CONNECT_TIMEOUT", "5"),
    auto_create_tables=_parse_bool(os.getenv("LESSONFORGE_AUTO_CREATE_TABLES")),
    model_provider=model_provider,
    model_name=_optional_str(os.getenv("LESSONFORGE_MODEL_NAME")),
    gemini_api_key=_optional_str(os.getenv("GEMINI_API_KEY")),
    openrouter_api_key=_optional_str(os.getenv("OPENROUTER_API_KEY")),
    max_retries=max_retries,
    task_service_provider=task_service_provider,
    base_url=_optional_str(os.getenv("LESSONFORGE_BASE_URL")),
    task_secret=_optional_str(os.getenv("LESSONFORGE_TASK_SECRET")),
    stale_lesson_seconds=_parse_positive_int("LESSONFORGE_STALE_LESSON_SECONDS", "1800"),
    reconcile_interval_seconds=_parse_positive_int("LESSONFORGE_RECONCILE_INTERVAL_SECONDS", "300"),
  )


@lru_cache(maxsize=1)
def get_database_settings() -> DatabaseSettings:
  """Load database settings without requiring web-runtime configuration."""
  # Keep database configuration isolated so migrations don't require model credentials.
  debug = _parse_bool(os.getenv("LESSONFORGE_DEBUG"))
  pg_connect_timeout = _parse_positive_int("LESSONFORGE_PG_CONNECT_TIMEOUT", "5")
  pg_dsn = _optional_str(os.getenv("LESSONFORGE_PG_DSN")) or _optional_str(os.getenv("DATABASE_URL"))

  return DatabaseSettings(debug=debug, pg_dsn=pg_dsn, pg_connect_timeout=pg_connect_timeout)
