# ABOUTME: Google Gemini AI service for newsletter text generation.
# ABOUTME: Wraps the streaming generate call with retries behind a plain generate_text(prompt).

from time import sleep

import structlog
from google import genai
from google.genai import types
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from linkit_weekly.config import Settings, get_settings

log = structlog.get_logger()


class AIService:
    """Service for interacting with Google Gemini AI."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._client: genai.Client | None = None

    @property
    def client(self) -> genai.Client:
        """Lazy-initialized Gemini client."""
        if self._client is None:
            if not self.settings.gemini_api_key:
                raise ValueError("GEMINI_API_KEY is required")
            self._client = genai.Client(
                api_key=self.settings.gemini_api_key.get_secret_value(),
            )
        return self._client

    def _generate_content_config(self, system_prompt: str | None) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.settings.ai_temperature,
            top_p=self.settings.ai_top_p,
            max_output_tokens=self.settings.ai_max_output_tokens,
            response_mime_type="text/plain",
            system_instruction=(
                [types.Part.from_text(text=system_prompt)] if system_prompt else None
            ),
        )

    @retry(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=60),
        before_sleep=lambda retry_state: log.warning(
            "api_retry",
            attempt=retry_state.attempt_number,
            wait=retry_state.next_action.sleep,
        ),
        reraise=True,
    )
    def generate_text(
        self,
        prompt: str,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> str:
        """Generate text with the Gemini model.

        Retries with exponential backoff on any API error.

        Returns:
            Generated text; may be empty if the model produced nothing.
        """
        model = model or self.settings.gemini_model
        log.debug("generating_content", model=model, prompt_length=len(prompt))

        contents = [
            types.Content(
                role="user",
                parts=[types.Part.from_text(text=prompt)],
            ),
        ]

        result = ""
        chunk_count = 0
        finish_reason = None

        for chunk in self.client.models.generate_content_stream(
            model=model,
            contents=contents,
            config=self._generate_content_config(system_prompt),
        ):
            chunk_count += 1
            if chunk.candidates:
                candidate = chunk.candidates[0]
                if candidate.finish_reason:
                    finish_reason = candidate.finish_reason
            if chunk.text:
                result += chunk.text

        log.debug(
            "generation_complete",
            chunk_count=chunk_count,
            result_length=len(result),
            finish_reason=str(finish_reason) if finish_reason else None,
        )

        if not result.strip():
            log.warning(
                "empty_generation_result",
                chunk_count=chunk_count,
                finish_reason=str(finish_reason) if finish_reason else "unknown",
            )

        if self.settings.ai_sleep_between_calls > 0:
            sleep(self.settings.ai_sleep_between_calls)

        return result
