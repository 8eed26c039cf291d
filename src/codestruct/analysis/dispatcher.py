"""Analysis dispatcher: turns files into reasoning-service requests.

One component serves every call kind. ``_dispatch`` sends the prompt,
parses the reply and applies a :class:`FallbackPolicy` on failure:

* ``SUBSTITUTE``: the batch analysis never fails; a fixed fallback
  result stands in for an unusable answer.
* ``RAISE``: single-file operations surface :class:`UpstreamError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from enum import StrEnum

from codestruct.analysis import parsing
from codestruct.analysis.llm.client import ReasoningService
from codestruct.analysis.llm.schemas import (
    CodebaseAnalysis,
    DocumentationResult,
    FileChange,
    FileReview,
    ImprovementResult,
)
from codestruct.config import Settings
from codestruct.constants import (
    FALLBACK_ARCHITECTURE,
    FALLBACK_LANGUAGE,
    CallKind,
    ChangeType,
)
from codestruct.errors import UpstreamError
from codestruct.prompts import (
    CODEBASE_ANALYSIS_SYSTEM,
    DOCUMENTATION_SYSTEM,
    FILE_REVIEW_SYSTEM,
    IMPROVEMENT_SYSTEM,
    PromptFile,
    build_codebase_prompt,
    build_documentation_prompt,
    build_improvement_prompt,
    build_review_prompt,
)

logger = logging.getLogger(__name__)


class FallbackPolicy(StrEnum):
    SUBSTITUTE = "substitute"
    RAISE = "raise"


def fallback_analysis() -> CodebaseAnalysis:
    """The fixed result recorded when the batch analysis is unusable."""
    return CodebaseAnalysis(
        detected_languages={FALLBACK_LANGUAGE: 1.0},
        architecture=FALLBACK_ARCHITECTURE,
        issues=[],
        suggestions=[],
        is_fallback=True,
    )


class AnalysisDispatcher:
    """Builds prompts, calls the reasoning service and parses replies."""

    def __init__(
        self,
        client: ReasoningService,
        settings: Settings | None = None,
    ) -> None:
        self._client = client
        self._settings = settings or Settings()

    async def _dispatch[T](
        self,
        *,
        kind: CallKind,
        prompt: str,
        system: str,
        parse: Callable[[str], T | None],
        policy: FallbackPolicy,
        fallback: Callable[[], T] | None = None,
        json_mode: bool = False,
    ) -> T:
        if policy is FallbackPolicy.SUBSTITUTE and fallback is None:
            raise ValueError("SUBSTITUTE policy needs a fallback")

        try:
            result = await self._client.complete(
                prompt, system, json_mode=json_mode, kind=kind
            )
        except UpstreamError as exc:
            if policy is FallbackPolicy.RAISE:
                raise
            logger.warning(
                "event=dispatch_fallback kind=%s reason=upstream"
                " attempts=%d",
                kind,
                len(exc.attempts),
            )
            return fallback()  # type: ignore[misc]
        except Exception:
            if policy is FallbackPolicy.RAISE:
                raise
            logger.exception(
                "event=dispatch_fallback kind=%s reason=client_error", kind
            )
            return fallback()  # type: ignore[misc]

        parsed = parse(result.content)
        if parsed is not None:
            logger.info(
                "event=dispatch_complete kind=%s model=%s"
                " input_tokens=%d output_tokens=%d",
                kind,
                result.model,
                result.input_tokens,
                result.output_tokens,
            )
            return parsed

        if policy is FallbackPolicy.RAISE:
            logger.warning(
                "event=dispatch_failed kind=%s reason=unparseable model=%s",
                kind,
                result.model,
            )
            raise UpstreamError(
                f"Reasoning service returned an unusable {kind} response",
                attempts=[f"{result.model}: unparseable output"],
            )
        logger.warning(
            "event=dispatch_fallback kind=%s reason=unparseable model=%s",
            kind,
            result.model,
        )
        return fallback()  # type: ignore[misc]

    async def analyze_codebase(
        self, files: Sequence[PromptFile]
    ) -> CodebaseAnalysis:
        """Analyze a batch of files. Never raises on upstream failure."""
        s = self._settings
        prompt = build_codebase_prompt(
            files,
            max_listed=s.analysis_max_listed_files,
            sample_files=s.analysis_sample_files,
            content_chars=s.analysis_content_chars,
        )
        return await self._dispatch(
            kind=CallKind.CODEBASE_ANALYSIS,
            prompt=prompt,
            system=CODEBASE_ANALYSIS_SYSTEM,
            parse=parsing.parse_codebase_analysis,
            policy=FallbackPolicy.SUBSTITUTE,
            fallback=fallback_analysis,
            json_mode=True,
        )

    async def document_file(
        self, content: str, path: str
    ) -> DocumentationResult:
        def parse(text: str) -> DocumentationResult | None:
            documented = parsing.strip_code_fences(text)
            if not documented.strip():
                return None
            return DocumentationResult(
                original=content,
                documented=documented,
                changes=[
                    FileChange(
                        type=ChangeType.ADDITION,
                        description=(
                            "Added comprehensive documentation and comments"
                        ),
                    )
                ],
            )

        return await self._dispatch(
            kind=CallKind.DOCUMENTATION,
            prompt=build_documentation_prompt(content, path),
            system=DOCUMENTATION_SYSTEM,
            parse=parse,
            policy=FallbackPolicy.RAISE,
        )

    async def improve_file(
        self, content: str, path: str
    ) -> ImprovementResult:
        return await self._dispatch(
            kind=CallKind.IMPROVEMENT,
            prompt=build_improvement_prompt(content, path),
            system=IMPROVEMENT_SYSTEM,
            parse=lambda text: parsing.parse_improvement(text, content),
            policy=FallbackPolicy.RAISE,
            json_mode=True,
        )

    async def review_file(self, content: str, path: str) -> FileReview:
        return await self._dispatch(
            kind=CallKind.FILE_REVIEW,
            prompt=build_review_prompt(content, path),
            system=FILE_REVIEW_SYSTEM,
            parse=lambda text: parsing.parse_review(text, path),
            policy=FallbackPolicy.RAISE,
            json_mode=True,
        )
