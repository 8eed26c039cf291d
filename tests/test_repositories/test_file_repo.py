"""Tests for SqlFileRepository, including full-set replacement."""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codestruct.models.project import Project
from codestruct.models.project_file import ProjectFile
from codestruct.repositories.file_repo import SqlFileRepository


def _file(path: str, content: str = "x") -> ProjectFile:
    return ProjectFile(
        path=path, content=content, language="python", size=len(content)
    )


async def test_replace_then_replace_leaves_second_set(
    session: AsyncSession, project: Project
) -> None:
    repo = SqlFileRepository(session)
    await repo.replace_for_project(
        project.id, [_file("a.py"), _file("b.py"), _file("c.py")]
    )
    await session.commit()
    await repo.replace_for_project(project.id, [_file("z.py")])
    await session.commit()

    listed = await repo.list_by_project(project.id)
    assert [f.path for f in listed] == ["z.py"]


async def test_replace_same_paths_again(
    session: AsyncSession, project: Project
) -> None:
    repo = SqlFileRepository(session)
    await repo.replace_for_project(project.id, [_file("a.py", "old")])
    await session.commit()
    await repo.replace_for_project(project.id, [_file("a.py", "new")])
    await session.commit()

    (only,) = await repo.list_by_project(project.id)
    assert only.content == "new"


async def test_list_ordered_by_path(
    session: AsyncSession, project: Project
) -> None:
    repo = SqlFileRepository(session)
    await repo.replace_for_project(
        project.id, [_file("src/b.py"), _file("a.py"), _file("src/a.py")]
    )
    listed = await repo.list_by_project(project.id)
    assert [f.path for f in listed] == ["a.py", "src/a.py", "src/b.py"]


async def test_duplicate_path_violates_constraint(
    session: AsyncSession, project: Project
) -> None:
    repo = SqlFileRepository(session)
    with pytest.raises(IntegrityError):
        await repo.replace_for_project(
            project.id, [_file("a.py"), _file("a.py")]
        )


async def test_update_content_keeps_identity(
    session: AsyncSession, project: Project
) -> None:
    repo = SqlFileRepository(session)
    (stored,) = await repo.replace_for_project(project.id, [_file("a.py")])
    await session.commit()

    updated = await repo.update_content(stored.id, "print(1)\n", 9)
    await session.commit()
    assert updated is not None
    assert updated.id == stored.id
    assert updated.path == "a.py"
    assert updated.language == "python"
    assert updated.content == "print(1)\n"
    assert updated.size == 9


async def test_update_content_missing_creates_nothing(
    session: AsyncSession, project: Project
) -> None:
    repo = SqlFileRepository(session)
    assert await repo.update_content("nope", "x", 1) is None
    assert await repo.list_by_project(project.id) == []


async def test_delete(session: AsyncSession, project: Project) -> None:
    repo = SqlFileRepository(session)
    (stored,) = await repo.replace_for_project(project.id, [_file("a.py")])
    await session.commit()
    assert await repo.delete(stored.id) is True
    assert await repo.delete(stored.id) is False
    assert await repo.get_by_id(stored.id) is None
