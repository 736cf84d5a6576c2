"""
OpenAI client for meeting summaries.
Thin wrapper over AsyncOpenAI that reports failures in the LLMError
taxonomy so the summary pipeline can classify them.
"""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from meetsync.config import Settings
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.services.errors import (
    LLMAuthFailed,
    LLMError,
    LLMGenericError,
    LLMQuotaExceeded,
    LLMRateLimited,
)

logger = get_logger(__name__)


@dataclass
class Completion:
    text: str
    tokens_used: int = 0


def _error_code(error: openai.APIStatusError) -> str | None:
    code = getattr(error, "code", None)
    if code:
        return code
    body = error.body if isinstance(error.body, dict) else {}
    nested = body.get("error") if isinstance(body.get("error"), dict) else body
    return nested.get("code")


def _wrap_status_error(error: openai.APIStatusError) -> LLMError:
    status_code = error.status_code
    code = _error_code(error)
    if status_code == 401:
        error_cls = LLMAuthFailed
    elif status_code == 429 and code == "insufficient_quota":
        error_cls = LLMQuotaExceeded
    elif status_code == 429:
        error_cls = LLMRateLimited
    else:
        error_cls = LLMGenericError
    return error_cls(str(error), status_code=status_code, code=code)


class OpenAILLMProvider:
    """Chat-completion based text generation."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        timeout: float = 30.0,
        max_retries: int = 2,
    ):
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=max_retries)
        logger.info("OpenAI client initialized", model=model, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAILLMProvider":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            timeout=settings.OPENAI_TIMEOUT_SECONDS,
            max_retries=settings.OPENAI_MAX_RETRIES,
        )

    async def close(self) -> None:
        await self.client.close()

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int = 250,
        temperature: float = 0.7,
    ) -> Completion:
        """
        Generate text for the prompt pair.

        Raises:
            LLMError: subclass matching the API failure
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                max_tokens=max_tokens,
                temperature=temperature,
                presence_penalty=0.3,
                frequency_penalty=0.3,
            )
        except openai.APIStatusError as e:
            raise _wrap_status_error(e) from e
        except openai.APIError as e:
            raise LLMGenericError(f"OpenAI request failed: {e}") from e

        text = ""
        if response.choices and response.choices[0].message.content:
            text = response.choices[0].message.content.strip()
        tokens_used = response.usage.total_tokens if response.usage else 0

        logger.info(
            "OpenAI completion successful",
            model=self.model,
            response_length=len(text),
            usage_tokens=tokens_used,
        )
        return Completion(text=text or "Unable to generate summary", tokens_used=tokens_used)
