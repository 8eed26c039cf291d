"""Reasoning client: tries each configured model once, in order.

One instance is built per server (or CLI run) and handed to the
dispatcher; nothing here is module-level state.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Protocol

from codestruct.analysis.llm import _llm_call
from codestruct.config import Settings
from codestruct.constants import ERROR_TRUNCATION_CHARS, SHORT_ID_HEX_LENGTH
from codestruct.errors import UpstreamError
from codestruct.logger import DispatchLogger
from codestruct.resilience.errors import classify_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LLMCallResult:
    """Text returned by the first model that produced a usable answer."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int


class ReasoningService(Protocol):
    """Text-in/text-out contract the dispatcher depends on."""

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        *,
        json_mode: bool = False,
        kind: str = "",
    ) -> LLMCallResult: ...


class ReasoningClient:
    """litellm-backed :class:`ReasoningService` with a model fallback chain."""

    def __init__(
        self,
        models: list[str],
        timeout: int,
        *,
        temperature: float = 0.1,
        dispatch_logger: DispatchLogger | None = None,
    ) -> None:
        if not models:
            raise ValueError("ReasoningClient needs at least one model")
        self._models = list(models)
        self._timeout = timeout
        self._temperature = temperature
        self._dispatch_logger = dispatch_logger

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        dispatch_logger: DispatchLogger | None = None,
    ) -> ReasoningClient:
        return cls(
            settings.litellm_model_chain,
            settings.llm_timeout_seconds,
            temperature=settings.llm_temperature,
            dispatch_logger=dispatch_logger,
        )

    @property
    def models(self) -> list[str]:
        return list(self._models)

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        *,
        json_mode: bool = False,
        kind: str = "",
    ) -> LLMCallResult:
        """Return the first non-empty completion from the model chain.

        Each model is attempted at most once. Raises
        :class:`UpstreamError` when every model fails or answers
        with empty text.
        """
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        request_id = uuid.uuid4().hex[:SHORT_ID_HEX_LENGTH]
        attempts: list[str] = []
        for model in self._models:
            start = time.perf_counter()
            try:
                content, in_tok, out_tok = await _llm_call.llm_call(
                    model,
                    messages,
                    self._timeout,
                    temperature=self._temperature,
                    json_mode=json_mode,
                )
            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                error_class = classify_error(exc)
                logger.warning(
                    "event=model_failed model=%s kind=%s"
                    " error_class=%s request_id=%s",
                    model,
                    kind,
                    error_class.value,
                    request_id,
                )
                attempts.append(f"{model}: {error_class.value}")
                self._log_attempt(
                    request_id, kind, model, False, duration_ms,
                    str(exc),
                )
                continue

            duration_ms = (time.perf_counter() - start) * 1000
            if not content.strip():
                logger.warning(
                    "event=model_empty_response model=%s kind=%s"
                    " request_id=%s",
                    model,
                    kind,
                    request_id,
                )
                attempts.append(f"{model}: empty response")
                self._log_attempt(
                    request_id, kind, model, False, duration_ms,
                    "empty response",
                )
                continue

            self._log_attempt(
                request_id, kind, model, True, duration_ms
            )
            return LLMCallResult(
                content=content,
                model=model,
                input_tokens=in_tok,
                output_tokens=out_tok,
            )

        message = "All reasoning backends failed"
        if self._dispatch_logger is not None:
            self._dispatch_logger.log_error(
                request_id,
                kind or "reasoning_client",
                f"{message}: {'; '.join(attempts)}"[
                    :ERROR_TRUNCATION_CHARS
                ],
            )
        raise UpstreamError(message, attempts=attempts)

    def _log_attempt(
        self,
        request_id: str,
        kind: str,
        model: str,
        ok: bool,
        duration_ms: float,
        error: str | None = None,
    ) -> None:
        if self._dispatch_logger is None:
            return
        self._dispatch_logger.log_attempt(
            request_id, kind, model, ok, duration_ms, error
        )
