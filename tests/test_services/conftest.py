"""Service fixtures wired to the in-memory fakes."""

import pytest

from codestruct.analysis.dispatcher import AnalysisDispatcher
from codestruct.api.dependencies import Repos
from codestruct.config import Settings
from codestruct.models.project import Project
from codestruct.models.user import User
from codestruct.resilience.locks import KeyedLock
from codestruct.services.file_service import FileService
from codestruct.services.project_service import ProjectService
from codestruct.services.user_service import UserService


@pytest.fixture
def locks() -> KeyedLock:
    return KeyedLock()


@pytest.fixture
def user_service(fake_repos: Repos, settings: Settings) -> UserService:
    return UserService(fake_repos.user, settings=settings)


@pytest.fixture
def project_service(
    fake_repos: Repos,
    dispatcher: AnalysisDispatcher,
    locks: KeyedLock,
    settings: Settings,
) -> ProjectService:
    return ProjectService(
        fake_repos.project,
        fake_repos.file,
        fake_repos.analysis,
        fake_repos.user,
        dispatcher=dispatcher,
        locks=locks,
        settings=settings,
    )


@pytest.fixture
def file_service(
    fake_repos: Repos, dispatcher: AnalysisDispatcher, locks: KeyedLock
) -> FileService:
    return FileService(
        fake_repos.file,
        fake_repos.project,
        dispatcher=dispatcher,
        locks=locks,
    )


@pytest.fixture
async def owner(user_service: UserService) -> User:
    return await user_service.get_or_create_demo_user()


@pytest.fixture
async def project(project_service: ProjectService, owner: User) -> Project:
    return await project_service.create(owner, "demo")
