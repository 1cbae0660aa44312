import logging
import logging.handlers
import sys
import traceback
from datetime import datetime
from pathlib import Path

from lessonforge.config import Settings

LOG_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
LOG_DIR = Path(__file__).resolve().parents[2] / "logs"

# Frames kept from the end of a traceback on the console.
_CONSOLE_TRACEBACK_FRAMES = 5
_ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi")
_QUIET_LOGGERS = ("httpx", "httpcore", "google_genai", "openai")

_active_log_path: Path | None = None


class ConsoleFormatter(logging.Formatter):
  """Shorten tracebacks on the console; the log file keeps them whole."""

  def formatException(self, ei) -> str:  # noqa: N802
    lines = traceback.format_exception(*ei)
    if len(lines) <= _CONSOLE_TRACEBACK_FRAMES + 1:
      return "".join(lines)
    return "".join([lines[0], "    ...\n", *lines[-_CONSOLE_TRACEBACK_FRAMES:]])


def _backup_name(default_name: str) -> str:
  # lessonforge_x.log.2 -> lessonforge_x.log-2
  stem, _, suffix = default_name.rpartition(".")
  return f"{stem}-{suffix}" if suffix.isdigit() else default_name


def _open_log_file(log_dir: Path) -> Path:
  try:
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"lessonforge_{datetime.now():%Y%m%d_%H%M%S}.log"
    log_path.touch(exist_ok=True)
  except OSError as exc:
    raise RuntimeError(f"Cannot prepare log file under {log_dir}: {exc}") from exc
  return log_path


def setup_logging(settings: Settings, log_dir: Path = LOG_DIR) -> Path:
  """Send every logger to stdout and a rotating file, returning the file path."""
  log_path = _open_log_file(log_dir)

  console = logging.StreamHandler(sys.stdout)
  console.setFormatter(ConsoleFormatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))

  rotating = logging.handlers.RotatingFileHandler(log_path, encoding="utf-8", maxBytes=settings.log_max_bytes, backupCount=settings.log_backup_count)
  rotating.namer = _backup_name
  rotating.setFormatter(logging.Formatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))

  handlers: list[logging.Handler] = [console, rotating]
  logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO, handlers=handlers, force=True)

  # uvicorn installs its own handlers; replace them so server logs land in the same file.
  for name in _ROUTED_LOGGERS:
    routed = logging.getLogger(name)
    routed.handlers = list(handlers)
    routed.propagate = False

  for name in _QUIET_LOGGERS:
    logging.getLogger(name).setLevel(logging.WARNING)

  return log_path


def _initialize_logging(settings: Settings) -> None:
  """Configure logging once per process and record the effective model setup."""
  global _active_log_path
  if _active_log_path is not None:
    return

  _active_log_path = setup_logging(settings)
  logger = logging.getLogger("lessonforge.core.logging")
  logger.info("Logging to %s", _active_log_path)
  logger.info("Model provider=%s model=%s max_retries=%s tasks=%s", settings.model_provider, settings.model_name or "<default>", settings.max_retries, settings.task_service_provider)
