"""Tests for SqlUserRepository and the User model."""

from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from codestruct.constants import SubscriptionTier
from codestruct.models.user import User
from codestruct.repositories.user_repo import SqlUserRepository


async def test_lookups(session: AsyncSession, user: User) -> None:
    repo = SqlUserRepository(session)
    assert (await repo.get_by_email("alice@example.com")) is user
    assert (await repo.get_by_username("alice")) is user
    assert await repo.get_by_email("nobody@example.com") is None


async def test_default_tier_is_trial(
    session: AsyncSession, user: User
) -> None:
    assert user.subscription_tier == SubscriptionTier.TRIAL


async def test_set_tier(session: AsyncSession, user: User) -> None:
    repo = SqlUserRepository(session)
    updated = await repo.set_tier(user.id, SubscriptionTier.PRO)
    await session.commit()
    assert updated is not None
    assert updated.subscription_tier == "pro"
    assert await repo.set_tier("nope", SubscriptionTier.PRO) is None


def test_trial_expired() -> None:
    past = datetime.now(UTC) - timedelta(days=1)
    user = User(
        username="u",
        email="u@example.com",
        subscription_tier=SubscriptionTier.TRIAL,
        trial_ends_at=past,
    )
    assert user.trial_expired is True
    # Naive timestamps (as SQLite returns them) are treated as UTC
    user.trial_ends_at = (datetime.now(UTC) + timedelta(days=1)).replace(
        tzinfo=None
    )
    assert user.trial_expired is False
    user.subscription_tier = SubscriptionTier.PRO
    user.trial_ends_at = past
    assert user.trial_expired is False
