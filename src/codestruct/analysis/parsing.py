"""Lenient parsing of reasoning-service text into result models.

Models often wrap JSON in markdown fences or surround it with prose.
Every ``parse_*`` function returns ``None`` when the text does not
conform, and the dispatcher decides what that means.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from codestruct.analysis.llm.schemas import (
    CodebaseAnalysis,
    FileChange,
    FileReview,
    ImprovementResult,
    Issue,
    Suggestion,
)
from codestruct.constants import ChangeType, IssueSeverity

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\n(.*?)\n?```", re.DOTALL)
_PERCENT_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*%?\s*$")


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Find the first JSON object in ``text``.

    Tries the whole text, then each fenced block, then the span from
    the first ``{`` to the last ``}``.
    """
    candidates = [text.strip()]
    candidates.extend(m.group(1).strip() for m in _FENCE_RE.finditer(text))
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        if not candidate:
            continue
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data  # pyright: ignore[reportUnknownVariableType]
    return None


def strip_code_fences(text: str) -> str:
    """Return the code inside a single fenced block, else ``text``."""
    stripped = text.strip()
    blocks = _FENCE_RE.findall(stripped)
    if len(blocks) == 1:
        return blocks[0]
    return stripped


def normalize_proportions(raw: object) -> dict[str, float]:
    """Turn a language→share mapping into fractions summing to 1.

    Accepts numbers or numeric strings (``"60%"``). Non-numeric and
    negative entries are dropped. Result is ordered by share, largest
    first.
    """
    if not isinstance(raw, dict):
        return {}
    shares: dict[str, float] = {}
    for key, value in raw.items():  # pyright: ignore[reportUnknownVariableType]
        name = str(key).strip().lower()  # pyright: ignore[reportUnknownArgumentType]
        number = _to_number(value)
        if not name or number is None or number < 0:
            continue
        shares[name] = shares.get(name, 0.0) + number
    total = sum(shares.values())
    if total <= 0:
        return {}
    ordered = sorted(shares.items(), key=lambda kv: (-kv[1], kv[0]))
    return {name: round(share / total, 4) for name, share in ordered}


def parse_issue(item: object, default_file: str = "") -> Issue | None:
    if not isinstance(item, dict):
        return None
    description = _text(item.get("description"))  # pyright: ignore[reportUnknownMemberType]
    if not description:
        return None
    return Issue(
        type=_text(item.get("type")) or "general",  # pyright: ignore[reportUnknownMemberType]
        severity=_severity(item.get("severity")),  # pyright: ignore[reportUnknownMemberType]
        file=_text(item.get("file")) or default_file,  # pyright: ignore[reportUnknownMemberType]
        description=description,
        line=_positive_int(item.get("line")),  # pyright: ignore[reportUnknownMemberType]
    )


def parse_suggestion(item: object) -> Suggestion | None:
    if not isinstance(item, dict):
        return None
    title = _text(item.get("title"))  # pyright: ignore[reportUnknownMemberType]
    description = _text(item.get("description"))  # pyright: ignore[reportUnknownMemberType]
    if not title and not description:
        return None
    return Suggestion(
        type=_text(item.get("type")) or "general",  # pyright: ignore[reportUnknownMemberType]
        title=title or description[:80],
        description=description,
        file=_text(item.get("file")) or None,  # pyright: ignore[reportUnknownMemberType]
        changes=_text(item.get("changes")) or None,  # pyright: ignore[reportUnknownMemberType]
    )


def parse_changes(raw: object) -> list[FileChange]:
    if not isinstance(raw, list):
        return []
    changes: list[FileChange] = []
    for item in raw:  # pyright: ignore[reportUnknownVariableType]
        if not isinstance(item, dict):
            continue
        description = _text(item.get("description"))  # pyright: ignore[reportUnknownMemberType]
        if not description:
            continue
        try:
            kind = ChangeType(_text(item.get("type")).lower())  # pyright: ignore[reportUnknownMemberType]
        except ValueError:
            kind = ChangeType.MODIFICATION
        changes.append(
            FileChange(
                type=kind,
                description=description,
                line_start=_positive_int(item.get("lineStart")),  # pyright: ignore[reportUnknownMemberType]
                line_end=_positive_int(item.get("lineEnd")),  # pyright: ignore[reportUnknownMemberType]
            )
        )
    return changes


def parse_codebase_analysis(text: str) -> CodebaseAnalysis | None:
    """Parse a codebase analysis, or ``None`` if the shape is wrong.

    Conforming output has a non-empty ``architecture`` string and at
    least one usable ``detectedLanguages`` entry. Malformed issue or
    suggestion items are dropped individually.
    """
    data = extract_json_object(text)
    if data is None:
        logger.warning("event=analysis_unparseable reason=no_json")
        return None

    languages = normalize_proportions(data.get("detectedLanguages"))
    architecture = _text(data.get("architecture"))
    if not languages or not architecture:
        logger.warning(
            "event=analysis_unparseable reason=missing_fields"
            " has_languages=%s has_architecture=%s",
            bool(languages),
            bool(architecture),
        )
        return None

    issues = [
        issue
        for issue in map(parse_issue, _list(data.get("issues")))
        if issue is not None
    ]
    suggestions = [
        s
        for s in map(parse_suggestion, _list(data.get("suggestions")))
        if s is not None
    ]
    try:
        return CodebaseAnalysis(
            detected_languages=languages,
            architecture=architecture,
            issues=issues,
            suggestions=suggestions,
        )
    except ValidationError as exc:
        logger.warning(
            "event=analysis_unparseable reason=validation error=%s", exc
        )
        return None


def parse_improvement(
    text: str, original: str
) -> ImprovementResult | None:
    data = extract_json_object(text)
    if data is None:
        return None
    improved = data.get("improved")
    if not isinstance(improved, str) or not improved.strip():
        return None
    return ImprovementResult(
        original=original,
        improved=improved,
        changes=parse_changes(data.get("changes")),
    )


def parse_review(text: str, path: str) -> FileReview | None:
    data = extract_json_object(text)
    if data is None or not isinstance(data.get("issues"), list):
        return None
    issues = [
        issue
        for item in _list(data.get("issues"))
        if (issue := parse_issue(item, default_file=path)) is not None
    ]
    return FileReview(summary=_text(data.get("summary")), issues=issues)


# ── helpers ──────────────────────────────────────────────


def _text(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def _list(value: object) -> list[object]:
    return list(value) if isinstance(value, list) else []  # pyright: ignore[reportUnknownArgumentType]


def _severity(value: object) -> IssueSeverity:
    try:
        return IssueSeverity(_text(value).lower())
    except ValueError:
        return IssueSeverity.MEDIUM


def _positive_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value.is_integer() and value > 0:
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        number = int(value.strip())
        return number if number > 0 else None
    return None


def _to_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        match = _PERCENT_RE.match(value)
        if match:
            return float(match.group(1))
    return None
