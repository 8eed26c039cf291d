"""Protocol-based repository interfaces.

SQL implementations satisfy these protocols structurally (no inheritance).
Test doubles can be plain classes or mocks matching the same signature.
Lookups on a missing id return ``None``/``False`` instead of raising.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Protocol

from codestruct.models.analysis import Analysis
from codestruct.models.project import Project
from codestruct.models.project_file import ProjectFile
from codestruct.models.user import User


class UserRepository(Protocol):
    async def get_by_id(self, user_id: str) -> User | None: ...
    async def get_by_email(self, email: str) -> User | None: ...
    async def get_by_username(self, username: str) -> User | None: ...
    async def create(self, user: User) -> User: ...
    async def set_tier(self, user_id: str, tier: str) -> User | None: ...


class ProjectRepository(Protocol):
    async def get_by_id(self, project_id: str) -> Project | None: ...
    async def list_by_user(self, user_id: str) -> list[Project]: ...
    async def create(self, project: Project) -> Project: ...
    async def update_counters(
        self,
        project_id: str,
        *,
        file_count: int,
        language_count: int,
        lines_processed: int,
        last_scan_at: datetime,
    ) -> Project | None: ...
    async def delete(self, project_id: str) -> bool: ...


class FileRepository(Protocol):
    async def get_by_id(self, file_id: str) -> ProjectFile | None: ...
    async def list_by_project(
        self, project_id: str
    ) -> list[ProjectFile]: ...
    async def replace_for_project(
        self, project_id: str, files: list[ProjectFile]
    ) -> list[ProjectFile]: ...
    async def update_content(
        self, file_id: str, content: str, size: int
    ) -> ProjectFile | None: ...
    async def delete(self, file_id: str) -> bool: ...
    async def delete_by_project(self, project_id: str) -> None: ...


class AnalysisRepository(Protocol):
    async def create(self, analysis: Analysis) -> Analysis: ...
    async def get_latest(self, project_id: str) -> Analysis | None: ...
    async def delete_by_project(self, project_id: str) -> None: ...


# Ends the unit of work shared by the repositories of one request
type Commit = Callable[[], Awaitable[None]]


async def noop_commit() -> None:
    """Commit for repositories without a transaction (fakes)."""
