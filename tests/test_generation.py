import httpx
import pytest
from pydantic_ai.exceptions import ModelHTTPError

from conftest import ScriptedModel

from tubetrack.config.settings import ConfigurationError, GenerationProfile, Settings
from tubetrack.services.generation import GenerationError, GenerativeSummarizerClient


def test_generate_returns_model_text(generator_factory):
    scripted = ScriptedModel('{"summary": "X"}')

    text = generator_factory(scripted).generate("Summarize this playlist", "rich")

    assert text == '{"summary": "X"}'
    assert scripted.prompts == ["Summarize this playlist"]


def test_generate_applies_profile_settings(generator_factory):
    scripted = ScriptedModel("ok")

    generator_factory(scripted).generate("prompt", GenerationProfile(temperature=0.3, top_p=0.5, max_output_tokens=256))

    model_settings = scripted.model_settings[-1]
    assert model_settings["temperature"] == 0.3
    assert model_settings["top_p"] == 0.5
    assert model_settings["max_tokens"] == 256


def test_named_profiles_come_from_generation_config(settings):
    assert settings.generation.profile("metadata_only").timeout_seconds == 30
    assert settings.generation.profile("analytical").temperature == 0.4
    assert settings.generation.profile("unknown").timeout_seconds == 60


def test_http_errors_carry_status_code(generator_factory):
    scripted = ScriptedModel(error=ModelHTTPError(status_code=503, model_name="function"))

    with pytest.raises(GenerationError) as excinfo:
        generator_factory(scripted).generate("prompt", "rich")

    assert excinfo.value.status_code == 503
    assert str(excinfo.value) == "Generation API error: 503"


def test_timeouts_become_generation_errors(generator_factory):
    scripted = ScriptedModel(error=httpx.ReadTimeout("timed out"))

    with pytest.raises(GenerationError, match="timed out"):
        generator_factory(scripted).generate("prompt", "metadata_only")


def test_connection_failures_become_generation_errors(generator_factory):
    scripted = ScriptedModel(error=httpx.ConnectError("connection refused"))

    with pytest.raises(GenerationError, match="request failed") as excinfo:
        generator_factory(scripted).generate("prompt", "rich")

    assert excinfo.value.status_code is None


def test_blank_replies_are_rejected(generator_factory):
    scripted = ScriptedModel("   ")

    with pytest.raises(GenerationError):
        generator_factory(scripted).generate("prompt", "rich")


def test_missing_credentials_are_a_configuration_error(console, monkeypatch):
    for name in ("GEMINI_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None, DATABASE_URL="postgresql://u:p@localhost/db")
    client = GenerativeSummarizerClient(settings=settings, console=console)

    with pytest.raises(ConfigurationError):
        client.generate("prompt", "rich")
