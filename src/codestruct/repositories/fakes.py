"""In-memory fake repositories for testing.

Dict-backed implementations of the repository protocols plus a
scripted reasoning client. No SQLAlchemy, no I/O: instant
operations for unit tests.
"""

# pyright: reportUnusedFunction=false

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from codestruct.analysis.llm.client import LLMCallResult
from codestruct.constants import ID_HEX_LENGTH
from codestruct.errors import UpstreamError
from codestruct.models.analysis import Analysis
from codestruct.models.project import Project
from codestruct.models.project_file import ProjectFile
from codestruct.models.user import User


class FakeUserRepository:
    """Dict-backed UserRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, User] = {}

    async def get_by_id(self, user_id: str) -> User | None:
        return self._store.get(user_id)

    async def get_by_email(self, email: str) -> User | None:
        return next(
            (u for u in self._store.values() if u.email == email),
            None,
        )

    async def get_by_username(self, username: str) -> User | None:
        return next(
            (u for u in self._store.values() if u.username == username),
            None,
        )

    async def create(self, user: User) -> User:
        if not user.id:
            user.id = uuid.uuid4().hex[:ID_HEX_LENGTH]
        user.created_at = datetime.now(UTC)
        self._store[user.id] = user
        return user

    async def set_tier(self, user_id: str, tier: str) -> User | None:
        user = self._store.get(user_id)
        if user is None:
            return None
        user.subscription_tier = tier
        return user


class FakeFileRepository:
    """Dict-backed FileRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, ProjectFile] = {}

    async def get_by_id(self, file_id: str) -> ProjectFile | None:
        return self._store.get(file_id)

    async def list_by_project(
        self, project_id: str
    ) -> list[ProjectFile]:
        return sorted(
            (
                f
                for f in self._store.values()
                if f.project_id == project_id
            ),
            key=lambda f: f.path,
        )

    async def replace_for_project(
        self, project_id: str, files: list[ProjectFile]
    ) -> list[ProjectFile]:
        now = datetime.now(UTC)
        # Build the new mapping first, then swap it in one step
        store = {
            fid: f
            for fid, f in self._store.items()
            if f.project_id != project_id
        }
        for f in files:
            if not f.id:
                f.id = uuid.uuid4().hex[:ID_HEX_LENGTH]
            f.project_id = project_id
            f.created_at = now
            f.updated_at = now
            store[f.id] = f
        self._store = store
        return files

    async def update_content(
        self, file_id: str, content: str, size: int
    ) -> ProjectFile | None:
        file = self._store.get(file_id)
        if file is None:
            return None
        file.content = content
        file.size = size
        file.updated_at = datetime.now(UTC)
        return file

    async def delete(self, file_id: str) -> bool:
        return self._store.pop(file_id, None) is not None

    async def delete_by_project(self, project_id: str) -> None:
        self._store = {
            fid: f
            for fid, f in self._store.items()
            if f.project_id != project_id
        }


class FakeAnalysisRepository:
    """List-backed AnalysisRepository for testing."""

    def __init__(self) -> None:
        self._store: list[Analysis] = []

    async def create(self, analysis: Analysis) -> Analysis:
        if not analysis.id:
            analysis.id = uuid.uuid4().hex[:ID_HEX_LENGTH]
        if analysis.created_at is None:
            analysis.created_at = datetime.now(UTC)
        self._store.append(analysis)
        return analysis

    async def get_latest(self, project_id: str) -> Analysis | None:
        latest: Analysis | None = None
        for a in self._store:
            if a.project_id != project_id:
                continue
            # >= so the most recently inserted wins a timestamp tie
            if latest is None or a.created_at >= latest.created_at:
                latest = a
        return latest

    async def delete_by_project(self, project_id: str) -> None:
        self._store = [
            a for a in self._store if a.project_id != project_id
        ]


class FakeProjectRepository:
    """Dict-backed ProjectRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, Project] = {}

    async def get_by_id(self, project_id: str) -> Project | None:
        return self._store.get(project_id)

    async def list_by_user(self, user_id: str) -> list[Project]:
        return [
            p for p in self._store.values() if p.user_id == user_id
        ]

    async def create(self, project: Project) -> Project:
        if not project.id:
            project.id = uuid.uuid4().hex[:ID_HEX_LENGTH]
        project.created_at = datetime.now(UTC)
        self._store[project.id] = project
        return project

    async def update_counters(
        self,
        project_id: str,
        *,
        file_count: int,
        language_count: int,
        lines_processed: int,
        last_scan_at: datetime,
    ) -> Project | None:
        project = self._store.get(project_id)
        if project is None:
            return None
        project.file_count = file_count
        project.language_count = language_count
        project.lines_processed = lines_processed
        project.last_scan_at = last_scan_at
        return project

    async def delete(self, project_id: str) -> bool:
        if project_id not in self._store:
            return False
        del self._store[project_id]
        return True


# ── Service fakes ─────────────────────────────────────


class FakeReasoningClient:
    """Scripted reasoning client: returns queued responses in order.

    Each queued item is either a string (returned as the completion
    text) or an exception instance (raised). When the queue is empty
    the ``default`` response is used; ``None`` means every call fails
    with ``UpstreamError``.
    """

    def __init__(
        self,
        responses: list[str | Exception] | None = None,
        default: str | None = None,
    ) -> None:
        self._responses = list(responses or [])
        self._default = default
        self.calls: list[dict[str, object]] = []

    def queue(self, *responses: str | Exception) -> None:
        self._responses.extend(responses)

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        *,
        json_mode: bool = False,
        kind: str = "",
    ) -> LLMCallResult:
        self.calls.append({
            "prompt": prompt,
            "system": system,
            "json_mode": json_mode,
            "kind": kind,
        })
        if self._responses:
            item = self._responses.pop(0)
        elif self._default is not None:
            item = self._default
        else:
            item = UpstreamError(
                "All reasoning backends failed", attempts=["fake"]
            )
        if isinstance(item, Exception):
            raise item
        return LLMCallResult(
            content=item,
            model="fake/model",
            input_tokens=0,
            output_tokens=0,
        )
