"""Concurrent full-replace uploads on one project."""

from __future__ import annotations

import asyncio
import uuid
from datetime import UTC, datetime

import pytest

from codestruct.config import Settings
from codestruct.ingestion.schemas import FileRecord
from codestruct.models.project import Project
from codestruct.models.project_file import ProjectFile
from codestruct.repositories.fakes import (
    FakeAnalysisRepository,
    FakeFileRepository,
    FakeProjectRepository,
    FakeUserRepository,
)
from codestruct.services.project_service import ProjectService

BATCH_A = [("a.py", "python"), ("b.py", "python"), ("c.py", "python")]
BATCH_B = [("x.go", "go"), ("y.ts", "typescript")]


class _InterleavingFileRepository(FakeFileRepository):
    """Yields to the event loop after the delete and after each insert."""

    async def replace_for_project(
        self, project_id: str, files: list[ProjectFile]
    ) -> list[ProjectFile]:
        await self.delete_by_project(project_id)
        await asyncio.sleep(0)
        now = datetime.now(UTC)
        for f in files:
            f.id = f.id or uuid.uuid4().hex
            f.project_id = project_id
            f.created_at = now
            f.updated_at = now
            self._store[f.id] = f
            await asyncio.sleep(0)
        return files


def _rows(batch: list[tuple[str, str]]) -> list[ProjectFile]:
    return [
        ProjectFile(path=path, content="x\n", language=lang, size=2)
        for path, lang in batch
    ]


def _records(batch: list[tuple[str, str]]) -> list[FileRecord]:
    return [
        FileRecord(path=path, content="x\n", language=lang)
        for path, lang in batch
    ]


@pytest.fixture
def files() -> _InterleavingFileRepository:
    return _InterleavingFileRepository()


@pytest.fixture
def projects() -> FakeProjectRepository:
    return FakeProjectRepository()


@pytest.fixture
async def project(projects: FakeProjectRepository) -> Project:
    return await projects.create(
        Project(
            user_id="owner-1",
            name="demo",
            file_count=0,
            language_count=0,
            lines_processed=0,
        )
    )


async def test_unlocked_replaces_interleave(
    files: _InterleavingFileRepository, project: Project
) -> None:
    await asyncio.gather(
        files.replace_for_project(project.id, _rows(BATCH_A)),
        files.replace_for_project(project.id, _rows(BATCH_B)),
    )
    stored = await files.list_by_project(project.id)
    assert len(stored) == len(BATCH_A) + len(BATCH_B)


async def test_concurrent_replaces_leave_one_batch(
    files: _InterleavingFileRepository,
    projects: FakeProjectRepository,
    project: Project,
    settings: Settings,
) -> None:
    service = ProjectService(
        projects,
        files,
        FakeAnalysisRepository(),
        FakeUserRepository(),
        settings=settings,
    )

    await asyncio.gather(
        service.replace_files(project.id, _records(BATCH_A)),
        service.replace_files(project.id, _records(BATCH_B)),
    )

    stored = await files.list_by_project(project.id)
    paths = sorted(f.path for f in stored)
    assert paths in (
        sorted(p for p, _ in BATCH_A),
        sorted(p for p, _ in BATCH_B),
    )
    refreshed = await projects.get_by_id(project.id)
    assert refreshed is not None
    assert refreshed.file_count == len(stored)
    assert refreshed.language_count == len({f.language for f in stored})
    assert refreshed.lines_processed == 2 * len(stored)
