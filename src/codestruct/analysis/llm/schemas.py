"""Pydantic models for reasoning-service output.

Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``), matching the web client and the
editor extension.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from codestruct.constants import ChangeType, IssueSeverity


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True
    )


class Issue(_WireModel):
    """A problem the reasoning service found in a file."""

    type: str = "general"
    severity: IssueSeverity = IssueSeverity.MEDIUM
    file: str = ""
    description: str
    line: int | None = None


class Suggestion(_WireModel):
    """An improvement the reasoning service proposes."""

    type: str = "general"
    title: str
    description: str = ""
    file: str | None = None
    changes: str | None = None


class CodebaseAnalysis(_WireModel):
    """Structured result of a whole-codebase analysis."""

    detected_languages: dict[str, float] = Field(
        default_factory=lambda: dict[str, float]()
    )
    architecture: str = ""
    issues: list[Issue] = Field(default_factory=lambda: list[Issue]())
    suggestions: list[Suggestion] = Field(
        default_factory=lambda: list[Suggestion]()
    )
    # Not persisted: set when the fixed fallback result was substituted
    is_fallback: bool = Field(default=False, exclude=True)


class FileChange(_WireModel):
    """One edit described alongside a rewritten file."""

    type: ChangeType = ChangeType.MODIFICATION
    description: str
    line_start: int | None = None
    line_end: int | None = None


class DocumentationResult(_WireModel):
    original: str
    documented: str
    changes: list[FileChange] = Field(
        default_factory=lambda: list[FileChange]()
    )


class ImprovementResult(_WireModel):
    original: str
    improved: str
    changes: list[FileChange] = Field(
        default_factory=lambda: list[FileChange]()
    )


class FileReview(_WireModel):
    """Issues found in a single file."""

    summary: str = ""
    issues: list[Issue] = Field(default_factory=lambda: list[Issue]())
