"""
Tests for the Gemini assistant wrapper.
"""

from types import SimpleNamespace

import pytest

from app.exceptions import UpstreamServiceError
from app.services import assistant as assistant_module
from app.services.assistant import SYSTEM_PROMPT, GeminiAssistant


class FakeModels:
    """Stand-in for ``client.aio.models``."""

    def __init__(self, text="A Selic é a taxa básica de juros.", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config=None):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error:
            raise self.error
        return SimpleNamespace(text=self.text)


def fake_client(models):
    return SimpleNamespace(aio=SimpleNamespace(models=models))


@pytest.fixture
def unconfigured():
    return GeminiAssistant(api_key="", model_name="gemini-test")


class TestGeminiAssistant:
    """Test answer handling and error mapping."""

    def test_without_key(self, unconfigured):
        assert unconfigured.available is False

    def test_with_key_builds_client(self, monkeypatch):
        calls = {}

        def recording_client(api_key):
            calls["api_key"] = api_key
            return fake_client(FakeModels())

        monkeypatch.setattr(assistant_module.genai, "Client", recording_client)

        assistant = GeminiAssistant(api_key="secret", model_name="gemini-test")
        assert assistant.available is True
        assert calls == {"api_key": "secret"}
        assert assistant.generation_config.system_instruction == SYSTEM_PROMPT

    @pytest.mark.anyio
    async def test_not_configured_raises(self, unconfigured):
        with pytest.raises(UpstreamServiceError) as exc_info:
            await unconfigured.complete("O que é Selic?")
        assert exc_info.value.service == "Gemini"

    @pytest.mark.anyio
    async def test_answer(self, unconfigured):
        models = FakeModels(text="  A Selic é a taxa básica de juros.\n")
        unconfigured.client = fake_client(models)

        answer = await unconfigured.complete("O que é Selic?")
        assert answer == "A Selic é a taxa básica de juros."
        assert models.calls[0]["model"] == "gemini-test"
        assert models.calls[0]["contents"] == "O que é Selic?"
        assert models.calls[0]["config"] is unconfigured.generation_config

    @pytest.mark.anyio
    @pytest.mark.parametrize("text", ["   ", None])
    async def test_empty_answer_raises(self, unconfigured, text):
        unconfigured.client = fake_client(FakeModels(text=text))
        with pytest.raises(UpstreamServiceError):
            await unconfigured.complete("O que é Selic?")

    @pytest.mark.anyio
    async def test_client_error_raises(self, unconfigured):
        unconfigured.client = fake_client(FakeModels(error=ValueError("blocked by safety filters")))
        with pytest.raises(UpstreamServiceError) as exc_info:
            await unconfigured.complete("O que é Selic?")
        assert "blocked" in str(exc_info.value)
