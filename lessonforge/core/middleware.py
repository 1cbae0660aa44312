import logging
import re
import time
from typing import Any

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from lessonforge.utils.ids import generate_request_id

logger = logging.getLogger("lessonforge.core.middleware")

REQUEST_ID_HEADER = "x-request-id"
# Client-supplied ids are echoed into logs, so only short opaque tokens are trusted.
_CLIENT_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def _resolve_request_id(headers: Headers) -> str:
  """Reuse a well-formed id from the caller, otherwise mint one."""
  supplied = headers.get(REQUEST_ID_HEADER)
  if supplied and _CLIENT_REQUEST_ID_RE.match(supplied):
    return supplied
  return generate_request_id()


class RequestLoggingMiddleware:
  """Tag every HTTP request with an id and log one line when it completes.

  Outlines and generated components are user content, so bodies are never
  logged; only the declared body size is.
  """

  def __init__(self, app: ASGIApp) -> None:
    self.app = app

  async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
    if scope["type"] != "http":
      await self.app(scope, receive, send)
      return

    headers = Headers(scope=scope)
    request_id = _resolve_request_id(headers)
    scope.setdefault("state", {})["request_id"] = request_id

    started = time.perf_counter()
    response: dict[str, Any] = {"status": 0}

    async def send_with_request_id(message: Message) -> None:
      if message["type"] == "http.response.start":
        response["status"] = message["status"]
        MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
      await send(message)

    try:
      await self.app(scope, receive, send_with_request_id)
    finally:
      elapsed_ms = (time.perf_counter() - started) * 1000
      logger.info(
        "%s %s status=%s body_bytes=%s request_id=%s took=%.1fms",
        scope.get("method", "-"),
        scope.get("path", ""),
        response["status"],
        headers.get("content-length", "-"),
        request_id,
        elapsed_ms,
      )
