"""Tests for the demo-user flow and subscription tiers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from codestruct.config import Settings
from codestruct.constants import SubscriptionTier
from codestruct.errors import ConflictError, NotFoundError, ValidationError
from codestruct.models.user import User
from codestruct.services.user_service import UserService


async def test_demo_user_created_once(
    user_service: UserService, settings: Settings
) -> None:
    first = await user_service.get_or_create_demo_user()
    second = await user_service.get_or_create_demo_user()

    assert first is second
    assert first.email == settings.demo_email
    assert first.subscription_tier == SubscriptionTier.TRIAL
    assert first.trial_ends_at is not None
    assert first.trial_ends_at > datetime.now(UTC) + timedelta(days=29)


async def test_register_trial_normalizes_email(
    user_service: UserService,
) -> None:
    user = await user_service.register_trial(" alice ", "Alice@Example.COM")
    assert user.username == "alice"
    assert user.email == "alice@example.com"


@pytest.mark.parametrize(
    ("username", "email"), [("", "a@b.c"), ("bob", "not-an-email")]
)
async def test_register_trial_rejects_bad_input(
    user_service: UserService, username: str, email: str
) -> None:
    with pytest.raises(ValidationError):
        await user_service.register_trial(username, email)


async def test_register_trial_duplicates(user_service: UserService) -> None:
    await user_service.register_trial("alice", "alice@example.com")

    with pytest.raises(ConflictError, match="email"):
        await user_service.register_trial("other", "ALICE@example.com")
    with pytest.raises(ConflictError, match="Username"):
        await user_service.register_trial("alice", "new@example.com")


async def test_upgrade(user_service: UserService, owner: User) -> None:
    upgraded = await user_service.upgrade(owner.id)
    assert upgraded.subscription_tier == SubscriptionTier.PRO
    assert upgraded.trial_expired is False

    status = user_service.subscription_status(upgraded)
    assert status["tier"] == SubscriptionTier.PRO
    assert status["trialDaysLeft"] is None
    assert status["maxFilesPerUpload"] is None


async def test_upgrade_unknown_user(user_service: UserService) -> None:
    with pytest.raises(NotFoundError):
        await user_service.upgrade("missing")


async def test_trial_status(user_service: UserService, owner: User) -> None:
    status = user_service.subscription_status(owner)
    assert status["tier"] == SubscriptionTier.TRIAL
    assert status["trialExpired"] is False
    assert status["trialDaysLeft"] in (29, 30)
    assert status["maxFilesPerUpload"] == 5


async def test_expired_trial(user_service: UserService, owner: User) -> None:
    owner.trial_ends_at = datetime.now(UTC) - timedelta(days=1)
    status = user_service.subscription_status(owner)
    assert status["trialExpired"] is True
    assert status["trialDaysLeft"] == 0
