"""LLM service - single-shot text generation via DashScope (通义千问).

The rest of the app only sees ``generate(prompt) -> str``. Failures are
mapped to ``GenerationError`` kinds so callers can report quota, auth and
model problems distinctly.
"""

from __future__ import annotations

import asyncio
from http import HTTPStatus
from typing import Protocol

import structlog

from gm_assistant.config import settings
from gm_assistant.core.errors import (
    GenerationError,
    GenerationErrorKind,
    GenerationNotConfiguredError,
)
from gm_assistant.services.prompt_builder import load_prompts

logger = structlog.get_logger(__name__)


class TextGenerator(Protocol):
    """Anything that turns a prompt into text (the LLM service, or a fake in tests)."""

    @property
    def is_configured(self) -> bool: ...

    async def generate(self, prompt: str, **params) -> str: ...


def _get_generation():
    """Lazy import of dashscope.Generation to avoid import-time crashes in test."""
    from dashscope import Generation

    return Generation


def classify_failure(status_code: int | None, code: str | None) -> GenerationErrorKind:
    """Map a DashScope status/error code pair to an error kind."""
    code = code or ""
    if status_code == HTTPStatus.UNAUTHORIZED or code == "InvalidApiKey":
        return GenerationErrorKind.UNAUTHENTICATED
    if status_code == HTTPStatus.FORBIDDEN or code.startswith("AccessDenied"):
        return GenerationErrorKind.PERMISSION_DENIED
    if (
        status_code == HTTPStatus.TOO_MANY_REQUESTS
        or code.startswith("Throttling")
        or code == "Arrearage"
    ):
        return GenerationErrorKind.QUOTA_EXHAUSTED
    if status_code == HTTPStatus.NOT_FOUND or code == "ModelNotFound":
        return GenerationErrorKind.MODEL_UNAVAILABLE
    return GenerationErrorKind.UNKNOWN


def _response_text(response) -> str:
    output = response.output
    choices = getattr(output, "choices", None)
    if choices:
        return choices[0].message.content or ""
    # result_format="text" responses carry the text directly
    return getattr(output, "text", None) or ""


class LLMService:
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = settings.DASHSCOPE_API_KEY if api_key is None else api_key
        self.model = model or settings.LLM_MODEL
        self.timeout = timeout or settings.LLM_TIMEOUT_SECONDS
        self._model_params = load_prompts().get("model_params", {})

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        if not self.is_configured:
            raise GenerationNotConfiguredError("DASHSCOPE_API_KEY is not configured.")

    async def generate(self, prompt: str, **params) -> str:
        """Generate a completion for ``prompt``; raises ``GenerationError`` on any failure."""
        self.ensure_configured()
        call_params = {**self._model_params, **params}

        Generation = _get_generation()
        try:
            # The SDK call is blocking; keep it off the event loop.
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    Generation.call,
                    model=self.model,
                    api_key=self.api_key,
                    messages=[{"role": "user", "content": prompt}],
                    result_format="message",
                    **call_params,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("generation_timeout", model=self.model, timeout=self.timeout)
            raise GenerationError(GenerationErrorKind.TIMEOUT) from None
        except Exception as exc:
            logger.warning("generation_call_failed", model=self.model, error=str(exc))
            raise GenerationError(GenerationErrorKind.UNKNOWN) from exc

        if response.status_code != HTTPStatus.OK:
            kind = classify_failure(response.status_code, getattr(response, "code", None))
            logger.warning(
                "generation_rejected",
                model=self.model,
                status_code=response.status_code,
                code=getattr(response, "code", None),
                kind=kind.value,
                detail=getattr(response, "message", None),
            )
            raise GenerationError(kind)

        text = _response_text(response).strip()
        if not text:
            raise GenerationError(GenerationErrorKind.EMPTY_RESPONSE)
        return text


llm_service = LLMService()
