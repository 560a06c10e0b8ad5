"""Text-generation client built on top of Pydantic AI."""

from __future__ import annotations

import time
from typing import Optional, Union

import httpx
from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings
from rich.console import Console

from tubetrack.config.settings import ConfigurationError, GenerationProfile, Settings, get_settings

SYSTEM_PROMPT = (
    "You are Tubetrack's learning-content analyst. You describe what YouTube playlists and videos "
    "teach, for whom, and at what level. Stay factual and answer in the JSON format requested."
)


class GenerationError(RuntimeError):
    """Raised when the generation endpoint fails or answers without usable text."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GenerativeSummarizerClient:
    """Send one prompt to the configured model and return its raw text reply.

    There is no retry loop: a failed call is reported to the caller, who may re-invoke.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        model: Optional[Model] = None,
        model_name: Optional[str] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console()
        self._model_name = model_name or self._settings.summary_model_name
        self._model = model
        self._agent: Optional[Agent[None, str]] = None

    @property
    def model_name(self) -> str:
        """Return the configured model identifier."""

        return self._model_name

    def generate(self, prompt: str, profile: Union[str, GenerationProfile]) -> str:
        """Run ``prompt`` with the generation parameters of ``profile``.

        Raises
        ------
        GenerationError
            On a non-success response (``status_code`` attached), a timeout or connection
            failure, or an empty reply.
        ConfigurationError
            If no model credentials are configured.
        """

        resolved = self._settings.generation.profile(profile) if isinstance(profile, str) else profile
        model_settings = ModelSettings(
            temperature=resolved.temperature,
            top_p=resolved.top_p,
            max_tokens=resolved.max_output_tokens,
            timeout=resolved.timeout_seconds,
        )
        agent = self._get_agent()

        self._console.log(
            f"Calling generation model {self._model_name} "
            f"(prompt_chars={len(prompt)}, timeout={resolved.timeout_seconds:.0f}s)"
        )
        start_time = time.perf_counter()
        try:
            result = agent.run_sync(prompt, model_settings=model_settings)
        except ModelHTTPError as exc:
            self._log_failure(f"status {exc.status_code}", time.perf_counter() - start_time)
            raise GenerationError(
                f"Generation API error: {exc.status_code}", status_code=exc.status_code
            ) from exc
        except httpx.TimeoutException as exc:
            self._log_failure("timeout", time.perf_counter() - start_time)
            raise GenerationError(
                f"Generation API timed out after {resolved.timeout_seconds:.0f}s"
            ) from exc
        except (httpx.HTTPError, OSError) as exc:
            self._log_failure(f"transport error: {exc}", time.perf_counter() - start_time)
            raise GenerationError(f"Generation API request failed: {exc}") from exc
        except UnexpectedModelBehavior as exc:
            self._log_failure(str(exc), time.perf_counter() - start_time)
            raise GenerationError("Empty or unexpected response format from generation API") from exc

        text = result.output
        duration_seconds = time.perf_counter() - start_time
        if not isinstance(text, str) or not text.strip():
            self._log_failure("empty text", duration_seconds)
            raise GenerationError("Empty response from generation API")

        self._console.log(
            f"Generation succeeded (duration={duration_seconds:.2f}s, chars={len(text)})"
        )
        return text

    def _get_agent(self) -> Agent[None, str]:
        if self._agent is None:
            model = self._model or self._create_model()
            self._agent = Agent(model=model, output_type=str, system_prompt=SYSTEM_PROMPT)
        return self._agent

    def _create_model(self) -> Model:
        """Instantiate the model for the first configured provider: Gemini, OpenAI, then Anthropic."""

        settings = self._settings
        if settings.gemini_api_key is not None:
            provider = GoogleProvider(api_key=settings.gemini_api_key.get_secret_value())
            return GoogleModel(self._model_name, provider=provider)
        if settings.openai_api_key is not None:
            provider = OpenAIProvider(api_key=settings.openai_api_key.get_secret_value())
            return OpenAIChatModel(self._model_name, provider=provider)
        if settings.anthropic_api_key is not None:
            provider = AnthropicProvider(api_key=settings.anthropic_api_key.get_secret_value())
            return AnthropicModel(self._model_name, provider=provider)
        raise ConfigurationError(
            "No language model credentials configured. Set GEMINI_API_KEY, OPENAI_API_KEY, or ANTHROPIC_API_KEY."
        )

    def _log_failure(self, reason: str, duration_seconds: float) -> None:
        self._console.log(
            f"[red]Generation failed[/red] (duration={duration_seconds:.2f}s, reason='{reason}')"
        )


__all__ = ["GenerationError", "GenerativeSummarizerClient", "SYSTEM_PROMPT"]
