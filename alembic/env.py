"""Alembic environment for the lessons schema, run through the asyncpg driver."""

import asyncio
import logging
from logging.config import fileConfig
from time import perf_counter

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

config = context.config
if config.config_file_name is not None:
  fileConfig(config.config_file_name)

# Importing the schema registers the lessons table on Base.metadata.
import lessonforge.schema.lessons  # noqa: E402, F401
from lessonforge.core.database import Base, _database_url  # noqa: E402

target_metadata = Base.metadata
logger = logging.getLogger("alembic.runtime.migration")


class _RevisionClock:
  """Report how long each revision took as Alembic applies it."""

  def __init__(self) -> None:
    self.started = perf_counter()

  def __call__(self, *, ctx: object, step: object, heads: set[str], run_args: dict[str, object]) -> None:
    now = perf_counter()
    logger.info("Applied lessons revision %s in %.3fs", getattr(step, "up_revision_id", None) or "unknown", now - self.started)
    self.started = now


def _lessons_dsn() -> str:
  url = _database_url()
  if not url:
    raise RuntimeError("LESSONFORGE_PG_DSN must be set to run migrations.")
  return url


def run_migrations_offline() -> None:
  """Emit SQL for the lessons schema without connecting."""
  context.configure(url=_lessons_dsn(), target_metadata=target_metadata, literal_binds=True, dialect_opts={"paramstyle": "named"}, compare_type=True)
  with context.begin_transaction():
    context.run_migrations()


def _migrate(connection: Connection) -> None:
  context.configure(connection=connection, target_metadata=target_metadata, compare_type=True, compare_server_default=True, on_version_apply=_RevisionClock())
  migration_context = context.get_context()
  logger.info("Lessons schema at %s; upgrading", migration_context.get_current_revision() or "base")
  with context.begin_transaction():
    context.run_migrations()
  logger.info("Lessons schema now at %s", ", ".join(migration_context.get_current_heads()) or "none")


async def run_async_migrations() -> None:
  section = config.get_section(config.config_ini_section) or {}
  section["sqlalchemy.url"] = _lessons_dsn()
  engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
  try:
    async with engine.connect() as connection:
      await connection.run_sync(_migrate)
  finally:
    await engine.dispose()


if context.is_offline_mode():
  run_migrations_offline()
else:
  asyncio.run(run_async_migrations())
