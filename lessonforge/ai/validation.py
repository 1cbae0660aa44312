"""Heuristic structural checks for generated TSX lesson components.

These checks are a cheap pre-filter, not a parser: they reject output that is
clearly broken or unsafe for the client renderer, and let everything else
through. The renderer strips the `"use client"` marker and the React import
before evaluating the component, so the rules below mirror what it expects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MISSING_DEFAULT_EXPORT = "Missing default export function"
MISSING_RETURN = "Missing return statement"
DANGEROUS_EXECUTION = "Contains dangerous code execution patterns"
UNSUPPORTED_IMPORTS = "Contains unsupported import statements"
UNBALANCED_BRACES = "Unbalanced braces"
UNBALANCED_PARENS = "Unbalanced parentheses"

_DEFAULT_EXPORT_MARKER = "export default function"
_RETURN_MARKERS = ("return (", "return(")
_DANGEROUS_MARKERS = ("eval(", "Function(")
_REACT_MODULE_MARKERS = ("'react'", '"react"')
_CODE_FENCE_RE = re.compile(r"```[\w+-]*")
_IMPORT_SOURCE_RE = re.compile(r"(?:^|;)\s*import\b(?:[^;]*?\bfrom)?\s*['\"]([^'\"]+)['\"]", re.MULTILINE)


@dataclass(frozen=True)
class ValidationResult:
  """Outcome of validating one generated component."""

  errors: tuple[str, ...] = ()

  @property
  def is_valid(self) -> bool:
    return not self.errors


def strip_code_fences(text: str) -> str:
  """Remove markdown code fences the model may add despite instructions."""
  return _CODE_FENCE_RE.sub("", text).strip()


def _has_unsupported_imports(code: str) -> bool:
  if "import" not in code:
    return False
  if not any(marker in code for marker in _REACT_MODULE_MARKERS):
    return True
  # The runtime has no module resolution, so every import must target react itself.
  for match in _IMPORT_SOURCE_RE.finditer(code):
    if match.group(1) != "react":
      return True
  return False


def validate_component(code: str) -> ValidationResult:
  """Run every structural check and collect all failures in a fixed order."""
  errors: list[str] = []

  if _DEFAULT_EXPORT_MARKER not in code:
    errors.append(MISSING_DEFAULT_EXPORT)

  if not any(marker in code for marker in _RETURN_MARKERS):
    errors.append(MISSING_RETURN)

  if any(marker in code for marker in _DANGEROUS_MARKERS):
    errors.append(DANGEROUS_EXECUTION)

  if _has_unsupported_imports(code):
    errors.append(UNSUPPORTED_IMPORTS)

  if code.count("{") != code.count("}"):
    errors.append(UNBALANCED_BRACES)

  if code.count("(") != code.count(")"):
    errors.append(UNBALANCED_PARENS)

  return ValidationResult(errors=tuple(errors))


def format_validation_errors(errors: tuple[str, ...] | list[str]) -> str:
  """Join validator messages for storage on a failed lesson."""
  return ", ".join(errors)
