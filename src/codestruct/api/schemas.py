"""Request/response schemas for the HTTP API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class APIResponse(BaseModel):
    """Standard response envelope for all API endpoints."""

    success: bool
    data: Any | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class _CamelBody(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True
    )


class ProjectCreate(BaseModel):
    """Request body for POST /api/projects."""

    name: str = Field(min_length=1, max_length=200)


class ScanRequest(BaseModel):
    """Request body for POST /api/projects/{id}/scan."""

    path: str = Field(min_length=1)


class PatchFile(_CamelBody):
    """Request body for PATCH /api/files/{id}.

    ``expectedContent`` is the content the edit was computed against;
    when present the patch is refused if the file has changed.
    """

    content: str
    expected_content: str | None = None


class UserRegister(BaseModel):
    """Request body for POST /api/users."""

    username: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320)


class ExtensionFile(BaseModel):
    path: str = Field(min_length=1)
    content: str
    language: str | None = None


class ExtensionAnalyzeRequest(BaseModel):
    """Request body for POST /api/extension/analyze."""

    files: list[ExtensionFile] = Field(min_length=1)


class ExtensionFileRequest(_CamelBody):
    """Request body for the single-file extension endpoints."""

    content: str
    file_name: str = Field(min_length=1)
