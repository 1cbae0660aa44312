from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from lessonforge.api.routes import lessons, tasks, worker
from lessonforge.config import get_settings
from lessonforge.core.errors import InvalidOutlineError, LessonNotFoundError
from lessonforge.core.exceptions import global_exception_handler, http_exception_handler, invalid_outline_exception_handler, lesson_not_found_exception_handler, request_validation_exception_handler
from lessonforge.core.lifespan import lifespan
from lessonforge.core.middleware import RequestLoggingMiddleware

__version__ = "0.1.0"

settings = get_settings()

app = FastAPI(title="LessonForge", version=__version__, lifespan=lifespan, docs_url="/docs" if settings.debug else None, redoc_url=None, openapi_url="/openapi.json" if settings.debug else None)

app.add_middleware(CORSMiddleware, allow_origins=list(settings.allowed_origins), allow_credentials=True, allow_methods=["GET", "POST", "OPTIONS"], allow_headers=["content-type", "authorization", "x-request-id"], expose_headers=["content-length", "x-request-id"])


# Add exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(InvalidOutlineError, invalid_outline_exception_handler)
app.add_exception_handler(LessonNotFoundError, lesson_not_found_exception_handler)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": __version__}


app.include_router(lessons.router, prefix="/api/lessons", tags=["lessons"])
app.include_router(tasks.router, prefix="/internal", tags=["tasks"])
app.include_router(worker.router, prefix="/worker", tags=["worker"])
