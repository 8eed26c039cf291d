"""Seed rows shared by the SQL repository tests."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from codestruct.models.project import Project
from codestruct.models.user import User


@pytest.fixture
async def user(session: AsyncSession) -> User:
    u = User(username="alice", email="alice@example.com")
    session.add(u)
    await session.flush()
    return u


@pytest.fixture
async def project(session: AsyncSession, user: User) -> Project:
    p = Project(user_id=user.id, name="demo")
    session.add(p)
    await session.flush()
    return p
