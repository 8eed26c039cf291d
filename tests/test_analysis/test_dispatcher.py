"""Tests for AnalysisDispatcher fallback and raise policies."""

from __future__ import annotations

import json
from collections.abc import Callable

import pytest

from codestruct.analysis.dispatcher import AnalysisDispatcher, fallback_analysis
from codestruct.config import Settings
from codestruct.constants import (
    FALLBACK_ARCHITECTURE,
    CallKind,
    ChangeType,
)
from codestruct.errors import UpstreamError
from codestruct.ingestion.schemas import FileRecord
from codestruct.repositories.fakes import FakeReasoningClient


def _files(n: int) -> list[FileRecord]:
    return [
        FileRecord(path=f"src/m{i}.py", content=f"x = {i}\n", language="python")
        for i in range(n)
    ]


class TestAnalyzeCodebase:
    async def test_well_formed_reply(
        self,
        dispatcher: AnalysisDispatcher,
        reasoning: FakeReasoningClient,
        analysis_json: Callable[..., str],
    ) -> None:
        reasoning.queue(analysis_json())
        result = await dispatcher.analyze_codebase(_files(2))

        assert result.is_fallback is False
        assert result.detected_languages == {"python": 0.5, "typescript": 0.5}
        assert result.issues[0].line == 3
        call = reasoning.calls[0]
        assert call["kind"] == CallKind.CODEBASE_ANALYSIS
        assert call["json_mode"] is True

    async def test_malformed_reply_substitutes_fallback(
        self,
        dispatcher: AnalysisDispatcher,
        reasoning: FakeReasoningClient,
    ) -> None:
        reasoning.queue("Sorry, I can't help with that.")
        result = await dispatcher.analyze_codebase(_files(1))

        assert result.is_fallback is True
        assert result.detected_languages == {"unknown": 1.0}
        assert result.architecture == FALLBACK_ARCHITECTURE
        assert result.issues == []
        assert result.suggestions == []

    async def test_upstream_failure_substitutes_fallback(
        self,
        dispatcher: AnalysisDispatcher,
        reasoning: FakeReasoningClient,
    ) -> None:
        # Nothing queued: the fake fails every call
        result = await dispatcher.analyze_codebase(_files(1))
        assert result == fallback_analysis()

    async def test_unexpected_client_error_substitutes_fallback(
        self,
        dispatcher: AnalysisDispatcher,
        reasoning: FakeReasoningClient,
    ) -> None:
        reasoning.queue(RuntimeError("socket closed"))
        result = await dispatcher.analyze_codebase(_files(1))
        assert result.is_fallback is True

    async def test_prompt_is_capped(
        self, reasoning: FakeReasoningClient
    ) -> None:
        settings = Settings(
            _env_file=None,  # pyright: ignore[reportCallIssue]
            analysis_max_listed_files=2,
            analysis_sample_files=1,
            analysis_content_chars=4,
        )
        files = [
            FileRecord(path=f"f{i}.py", content="abcdefgh", language="python")
            for i in range(5)
        ]
        await AnalysisDispatcher(reasoning, settings).analyze_codebase(files)

        prompt = str(reasoning.calls[0]["prompt"])
        assert "(5 total)" in prompt
        assert "f1.py (python)" in prompt
        assert "f2.py (python)" not in prompt
        assert "... and 3 more files" in prompt
        assert "// f0.py\nabcd\n" in prompt
        assert "abcde" not in prompt
        assert "// f1.py" not in prompt


class TestSingleFileOperations:
    async def test_document_strips_fences(
        self,
        dispatcher: AnalysisDispatcher,
        reasoning: FakeReasoningClient,
    ) -> None:
        reasoning.queue('```python\n"""Module."""\nx = 1\n```')
        result = await dispatcher.document_file("x = 1\n", "a.py")

        assert result.original == "x = 1\n"
        assert result.documented == '"""Module."""\nx = 1'
        assert [c.type for c in result.changes] == [ChangeType.ADDITION]
        assert "Filename: a.py" in str(reasoning.calls[0]["prompt"])

    async def test_document_upstream_failure_raises(
        self, dispatcher: AnalysisDispatcher
    ) -> None:
        with pytest.raises(UpstreamError):
            await dispatcher.document_file("x = 1\n", "a.py")

    async def test_improve_parses_changes(
        self,
        dispatcher: AnalysisDispatcher,
        reasoning: FakeReasoningClient,
    ) -> None:
        reasoning.queue(
            json.dumps({
                "improved": "x: int = 1\n",
                "changes": [
                    {"type": "modification", "description": "Typed x",
                     "lineStart": 1, "lineEnd": 1}
                ],
            })
        )
        result = await dispatcher.improve_file("x = 1\n", "a.py")

        assert result.improved == "x: int = 1\n"
        assert result.changes[0].line_start == 1
        dumped = result.model_dump(by_alias=True, mode="json")
        assert dumped["changes"][0]["lineEnd"] == 1

    async def test_improve_unusable_reply_raises(
        self,
        dispatcher: AnalysisDispatcher,
        reasoning: FakeReasoningClient,
    ) -> None:
        reasoning.queue("Here is your improved code: x = 1")
        with pytest.raises(UpstreamError) as exc:
            await dispatcher.improve_file("x = 1\n", "a.py")
        assert "improvement" in exc.value.message

    async def test_review_defaults_issue_file(
        self,
        dispatcher: AnalysisDispatcher,
        reasoning: FakeReasoningClient,
    ) -> None:
        reasoning.queue(
            '{"summary": "Mostly fine.", "issues": ['
            '{"severity": "low", "description": "Magic number", "line": 1}]}'
        )
        review = await dispatcher.review_file("x = 42\n", "src/a.py")

        assert review.summary == "Mostly fine."
        assert review.issues[0].file == "src/a.py"
        assert reasoning.calls[0]["kind"] == CallKind.FILE_REVIEW
