"""Pydantic models for the ingestion data flow."""

from pydantic import BaseModel, Field


class FileRecord(BaseModel):
    """One collected or uploaded source file."""

    path: str  # relative, '/'-separated
    content: str
    language: str
    size: int = 0  # bytes of the UTF-8 encoded content


class CollectedFiles(BaseModel):
    """Output of the collector: ordered records plus scan metadata."""

    files: list[FileRecord] = Field(
        default_factory=lambda: list[FileRecord]()
    )
    skipped: list[str] = Field(default_factory=lambda: list[str]())
    truncated: bool = False  # stopped at the file cap
    total_lines: int = 0
