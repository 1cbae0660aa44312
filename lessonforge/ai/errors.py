"""Model error type and classification helpers for AI provider handling."""

from __future__ import annotations

from collections.abc import Iterable

_PROVIDER_HINTS: tuple[str, ...] = (
  "unsupported model",
  "model not found",
  "no such model",
  "not available",
  "rate limit",
  "quota",
  "resource exhausted",
  "429",
  "timeout",
  "timed out",
  "connection",
  "network",
  "api key",
  "unauthorized",
  "forbidden",
  "service unavailable",
  "bad gateway",
  "gateway",
)


class ModelError(RuntimeError):
  """Raised when a model call fails or returns no usable text."""

  def __init__(self, message: str, *, provider: str | None = None) -> None:
    super().__init__(message)
    self.provider = provider


def _match_hint(message: str, hints: Iterable[str]) -> bool:
  """Return True when any hint appears in the message."""
  return any(hint in message for hint in hints)


def is_provider_error(exc: BaseException) -> bool:
  """Return True when an exception indicates a provider, quota, or transport failure."""
  # Walk the cause chain because ModelError wraps the SDK exception.
  current: BaseException | None = exc
  while current is not None:
    if _match_hint(str(current).lower(), _PROVIDER_HINTS):
      return True
    current = current.__cause__
  return False
