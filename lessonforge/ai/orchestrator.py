"Orchestration for the lesson component generation pipeline."

from __future__ import annotations

import logging
from dataclasses import dataclass

from lessonforge.ai.agents import BuildInput, ComponentBuilderAgent, ComponentRepairerAgent, RepairInput, TitleExtractorAgent
from lessonforge.ai.errors import is_provider_error
from lessonforge.ai.providers.base import TextModel
from lessonforge.ai.validation import ValidationResult, format_validation_errors, validate_component

DEFAULT_MAX_RETRIES = 3
UNKNOWN_ERROR = "Unknown error occurred"


@dataclass(frozen=True)
class GenerationAttempt:
  """One outer iteration of the generation loop. Never persisted."""

  attempt_number: int
  outline: str
  produced_code: str
  validation: ValidationResult


@dataclass(frozen=True)
class GenerationResult:
  """Output from the generation orchestrator."""

  success: bool
  title: str | None = None
  code: str | None = None
  error: str | None = None
  attempts: int = 0

  @classmethod
  def succeeded(cls, *, title: str, code: str, attempts: int) -> GenerationResult:
    return cls(success=True, title=title, code=code, attempts=attempts)

  @classmethod
  def failed(cls, *, error: str, attempts: int) -> GenerationResult:
    return cls(success=False, error=error, attempts=attempts)


class LessonOrchestrator:
  """Coordinates title extraction, component generation, validation and repair."""

  def __init__(self, model: TextModel, *, max_retries: int = DEFAULT_MAX_RETRIES) -> None:
    if max_retries < 1:
      raise ValueError("max_retries must be a positive integer.")
    self._max_retries = max_retries
    self._title_extractor = TitleExtractorAgent(model=model)
    self._builder = ComponentBuilderAgent(model=model)
    self._repairer = ComponentRepairerAgent(model=model)
    self._logger = logging.getLogger(__name__)

  @property
  def max_retries(self) -> int:
    return self._max_retries

  async def generate(self, outline: str, lesson_id: str | None = None) -> GenerationResult:
    """Run the bounded title -> code -> validate -> repair loop for one outline.

    Each outer attempt regenerates both the title and the code. A failed
    validation earns exactly one repair call unless it is the final attempt,
    in which case the loop stops and reports the validator messages. Errors
    raised by the model are absorbed while attempts remain.
    """
    last_error = UNKNOWN_ERROR

    for attempt in range(1, self._max_retries + 1):
      call_index = f"{attempt}/{self._max_retries}"
      is_last = attempt == self._max_retries
      self._logger.info("Generation attempt %s lesson_id=%s", call_index, lesson_id or "-")

      try:
        title = await self._title_extractor.run(outline, lesson_id=lesson_id, call_index=call_index)
        code = await self._builder.run(BuildInput(outline=outline, attempt=attempt), lesson_id=lesson_id, call_index=call_index)
        current = GenerationAttempt(attempt_number=attempt, outline=outline, produced_code=code, validation=validate_component(code))

        if current.validation.is_valid:
          self._logger.info("Generation attempt %s produced a valid component lesson_id=%s", call_index, lesson_id or "-")
          return GenerationResult.succeeded(title=title, code=current.produced_code, attempts=attempt)

        summary = format_validation_errors(current.validation.errors)
        self._logger.warning("Generation attempt %s failed validation lesson_id=%s errors=%s", call_index, lesson_id or "-", summary)

        if is_last:
          return GenerationResult.failed(error=f"Code validation failed after {self._max_retries} attempts: {summary}", attempts=attempt)

        repaired = await self._repairer.run(RepairInput(code=current.produced_code, errors=current.validation.errors), lesson_id=lesson_id, call_index=call_index)
        repaired_validation = validate_component(repaired)
        if repaired_validation.is_valid:
          self._logger.info("Repair on attempt %s produced a valid component lesson_id=%s", call_index, lesson_id or "-")
          return GenerationResult.succeeded(title=title, code=repaired, attempts=attempt)

        last_error = format_validation_errors(repaired_validation.errors)
        self._logger.warning("Repair on attempt %s still invalid lesson_id=%s errors=%s", call_index, lesson_id or "-", last_error)

      except Exception as exc:  # noqa: BLE001
        last_error = str(exc) or UNKNOWN_ERROR
        kind = "provider" if is_provider_error(exc) else "pipeline"
        self._logger.error("Generation attempt %s raised lesson_id=%s kind=%s error=%s", call_index, lesson_id or "-", kind, last_error, exc_info=True)
        if is_last:
          return GenerationResult.failed(error=last_error, attempts=attempt)

    # Unreachable: the final attempt always returns above.
    return GenerationResult.failed(error=last_error, attempts=self._max_retries)
