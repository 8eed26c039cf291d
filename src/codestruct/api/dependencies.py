"""FastAPI dependency injection for repositories and services."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import Depends, Request

from codestruct.analysis.dispatcher import AnalysisDispatcher
from codestruct.api.app_state import AppState
from codestruct.models.user import User
from codestruct.repositories.protocols import (
    AnalysisRepository,
    Commit,
    FileRepository,
    ProjectRepository,
    UserRepository,
)
from codestruct.services.file_service import FileService
from codestruct.services.project_service import ProjectService
from codestruct.services.user_service import UserService


@dataclass
class Repos:
    """Repository container resolved per-request via Depends.

    All four repositories share one session; ``commit`` ends its
    transaction. Work that is never committed is rolled back when
    the request finishes.
    """

    user: UserRepository
    project: ProjectRepository
    file: FileRepository
    analysis: AnalysisRepository
    commit: Commit


def get_app_state(request: Request) -> AppState:
    return request.app.state.typed  # type: ignore[no-any-return]


async def get_repos(
    request: Request,
) -> AsyncIterator[Repos]:
    """Generator dep: session lives for entire request."""
    from codestruct.repositories.analysis_repo import (
        SqlAnalysisRepository,
    )
    from codestruct.repositories.file_repo import SqlFileRepository
    from codestruct.repositories.project_repo import (
        SqlProjectRepository,
    )
    from codestruct.repositories.user_repo import SqlUserRepository

    session_factory = get_app_state(request).session_factory
    if session_factory is None:
        raise RuntimeError("Database is not initialized")
    async with session_factory() as session:
        yield Repos(
            user=SqlUserRepository(session),
            project=SqlProjectRepository(session),
            file=SqlFileRepository(session),
            analysis=SqlAnalysisRepository(session),
            commit=session.commit,
        )


def get_dispatcher(request: Request) -> AnalysisDispatcher:
    return get_app_state(request).dispatcher


def get_project_service(
    request: Request,
    repos: Repos = Depends(get_repos),
) -> ProjectService:
    state = get_app_state(request)
    return ProjectService(
        repos.project,
        repos.file,
        repos.analysis,
        repos.user,
        commit=repos.commit,
        dispatcher=state.dispatcher,
        locks=state.locks,
        settings=state.settings,
    )


def get_file_service(
    request: Request,
    repos: Repos = Depends(get_repos),
) -> FileService:
    state = get_app_state(request)
    return FileService(
        repos.file,
        repos.project,
        commit=repos.commit,
        dispatcher=state.dispatcher,
        locks=state.locks,
    )


def get_user_service(
    request: Request,
    repos: Repos = Depends(get_repos),
) -> UserService:
    return UserService(
        repos.user,
        commit=repos.commit,
        settings=get_app_state(request).settings,
    )


async def get_current_user(
    service: UserService = Depends(get_user_service),
) -> User:
    """Stub identity: every request acts as the demo user."""
    return await service.get_or_create_demo_user()
