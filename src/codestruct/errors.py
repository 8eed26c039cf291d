"""Domain exceptions mapped to HTTP statuses by the API layer."""

from __future__ import annotations


class CodeStructError(Exception):
    """Base class for errors with a user-facing message."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CodeStructError):
    """Malformed create/upload/patch payload."""

    status_code = 400


class NotFoundError(CodeStructError):
    """Missing user, project or file identifier."""

    status_code = 404


class ConflictError(CodeStructError):
    """Patch computed against content that has since changed."""

    status_code = 409


class UpstreamError(CodeStructError):
    """Every reasoning backend failed or returned unusable output."""

    status_code = 500

    def __init__(
        self, message: str, attempts: list[str] | None = None
    ) -> None:
        super().__init__(message)
        self.attempts = attempts or []
