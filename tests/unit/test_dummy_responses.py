"""Tests for deterministic dummy AI responses and the model adapter."""

from __future__ import annotations

import pytest

from lessonforge.ai.errors import ModelError, is_provider_error
from lessonforge.ai.providers.base import AIModel, ModelResponse, SimpleModelResponse
from lessonforge.ai.providers.gemini import GeminiModel
from lessonforge.telemetry.context import llm_call_context


class _StaticModel(AIModel):
  name = "static"
  provider_name = "test"

  def __init__(self, *, response: SimpleModelResponse | None = None, error: Exception | None = None) -> None:
    self._response = response
    self._error = error

  async def generate(self, prompt: str) -> ModelResponse:
    if self._error is not None:
      raise self._error
    return self._response


def test_load_dummy_response_resolves_repo_fixtures(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("LESSONFORGE_USE_DUMMY_TITLE_EXTRACTOR_RESPONSE", "1")
  monkeypatch.delenv("LESSONFORGE_DUMMY_TITLE_EXTRACTOR_RESPONSE_PATH", raising=False)
  # The repo includes `fixtures/dummy_title_extractor_response.md`, so this should load successfully.
  text = AIModel.load_dummy_response("TitleExtractor")
  assert text is not None
  assert len(text.strip()) > 0


def test_load_dummy_response_honours_explicit_path(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
  fixture = tmp_path / "builder.md"
  fixture.write_text("export default function X() { return (<div />); }", encoding="utf-8")
  monkeypatch.setenv("LESSONFORGE_USE_DUMMY_COMPONENT_BUILDER_RESPONSE", "true")
  monkeypatch.setenv("LESSONFORGE_DUMMY_COMPONENT_BUILDER_RESPONSE_PATH", str(fixture))

  assert AIModel.load_dummy_response("COMPONENT_BUILDER") == "export default function X() { return (<div />); }"


def test_load_dummy_response_disabled_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.delenv("LESSONFORGE_USE_DUMMY_COMPONENT_REPAIRER_RESPONSE", raising=False)
  assert AIModel.load_dummy_response("ComponentRepairer") is None


def test_env_agent_key_snake_cases_agent_names() -> None:
  assert AIModel._env_agent_key("ComponentBuilder") == "COMPONENT_BUILDER"
  assert AIModel._env_agent_key("TitleExtractor") == "TITLE_EXTRACTOR"


@pytest.mark.anyio
async def test_gemini_model_serves_dummy_without_network(monkeypatch: pytest.MonkeyPatch) -> None:
  monkeypatch.setenv("LESSONFORGE_USE_DUMMY_TITLE_EXTRACTOR_RESPONSE", "1")
  monkeypatch.delenv("LESSONFORGE_DUMMY_TITLE_EXTRACTOR_RESPONSE_PATH", raising=False)
  model = GeminiModel("gemini-2.0-flash", api_key="test-key")

  with llm_call_context(agent="TitleExtractor", lesson_id="lesson-1", purpose="extract_title", call_index="1/3"):
    text = await model.complete("ignored prompt")

  assert text.strip() == "Binary Search in Ten Minutes"


@pytest.mark.anyio
async def test_complete_wraps_sdk_failures_in_model_error() -> None:
  model = _StaticModel(error=ConnectionError("connection reset by peer"))

  with pytest.raises(ModelError) as excinfo:
    await model.complete("prompt")

  assert str(excinfo.value) == "test request failed: connection reset by peer"
  assert excinfo.value.provider == "test"
  assert isinstance(excinfo.value.__cause__, ConnectionError)
  assert is_provider_error(excinfo.value)


@pytest.mark.anyio
async def test_complete_rejects_responses_without_text() -> None:
  model = _StaticModel(response=SimpleModelResponse(content=None))  # type: ignore[arg-type]
  with pytest.raises(ModelError, match="without text"):
    await model.complete("prompt")


@pytest.mark.anyio
async def test_complete_returns_text() -> None:
  model = _StaticModel(response=SimpleModelResponse(content="hello", usage={"total_tokens": 3}))
  assert await model.complete("prompt") == "hello"


def test_is_provider_error_ignores_plain_failures() -> None:
  assert not is_provider_error(ValueError("bad outline"))
