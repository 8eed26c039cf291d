"""Shared test fixtures: in-memory SQLite, fake repos, API client."""

import os

# Force demo API keys for all tests: no real LLM calls.
# These are set unconditionally at import time, so even if you have
# real keys in your shell environment, pytest overwrites them before
# any Settings() is created.
os.environ["ANTHROPIC_API_KEY"] = "for-demo-purposes-only"
os.environ["OPENAI_API_KEY"] = "for-demo-purposes-only"

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from codestruct.analysis.dispatcher import AnalysisDispatcher
from codestruct.api.app_state import AppState
from codestruct.api.dependencies import Repos, get_repos
from codestruct.config import Settings, create_app_engine
from codestruct.main import app
from codestruct.models.base import Base
from codestruct.repositories.fakes import (
    FakeAnalysisRepository,
    FakeFileRepository,
    FakeProjectRepository,
    FakeReasoningClient,
    FakeUserRepository,
)
from codestruct.repositories.protocols import noop_commit
from codestruct.resilience.locks import KeyedLock


def _analysis_json(**overrides: Any) -> str:
    payload: dict[str, Any] = {
        "detectedLanguages": {"python": 0.5, "typescript": 0.5},
        "architecture": "Layered service with a thin HTTP facade.",
        "issues": [
            {
                "type": "missing_docs",
                "severity": "medium",
                "file": "a.py",
                "description": "Public function lacks a docstring.",
                "line": 3,
            }
        ],
        "suggestions": [
            {
                "type": "documentation",
                "title": "Document public API",
                "description": "Add docstrings to exported functions.",
            }
        ],
    }
    payload.update(overrides)
    return json.dumps(payload)


@pytest.fixture
def analysis_json() -> Callable[..., str]:
    """Builds a well-formed codebase analysis reply."""
    return _analysis_json


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,  # pyright: ignore[reportCallIssue]
        database_url="sqlite:///:memory:",
        data_dir=tmp_path / "data",
        log_dir=tmp_path / "logs",
        browse_root=str(tmp_path),
        trial_max_files=5,
    )


@pytest.fixture
async def engine():
    """Function-scoped in-memory engine with fresh tables."""
    engine = create_app_engine("sqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
def fake_repos() -> Repos:
    return Repos(
        user=FakeUserRepository(),
        project=FakeProjectRepository(),
        file=FakeFileRepository(),
        analysis=FakeAnalysisRepository(),
        commit=noop_commit,
    )


@pytest.fixture
def reasoning() -> FakeReasoningClient:
    """Scripted reasoning client; every unscripted call fails."""
    return FakeReasoningClient()


@pytest.fixture
def dispatcher(
    reasoning: FakeReasoningClient, settings: Settings
) -> AnalysisDispatcher:
    return AnalysisDispatcher(reasoning, settings)


@pytest.fixture
async def client(
    settings: Settings,
    fake_repos: Repos,
    dispatcher: AnalysisDispatcher,
):
    """API client over fake repos (no database, no LLM)."""
    app.state.settings = settings
    app.state.typed = AppState(
        settings=settings,
        session_factory=None,
        dispatcher=dispatcher,
        locks=KeyedLock(),
    )
    app.dependency_overrides[get_repos] = lambda: fake_repos

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test"
    ) as c:
        yield c

    app.dependency_overrides.clear()

