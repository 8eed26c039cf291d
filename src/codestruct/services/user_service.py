"""Demo-user flow and subscription tier management."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from codestruct.config import Settings
from codestruct.constants import SubscriptionTier
from codestruct.errors import ConflictError, NotFoundError, ValidationError
from codestruct.models.user import User
from codestruct.repositories.protocols import (
    Commit,
    UserRepository,
    noop_commit,
)

logger = logging.getLogger(__name__)


class UserService:
    def __init__(
        self,
        users: UserRepository,
        *,
        commit: Commit = noop_commit,
        settings: Settings | None = None,
    ) -> None:
        self._users = users
        self._commit = commit
        self._settings = settings or Settings()

    async def get_or_create_demo_user(self) -> User:
        """Return the configured demo user, creating it on first use."""
        user = await self._users.get_by_email(self._settings.demo_email)
        if user is not None:
            return user
        user = await self._create_trial(
            self._settings.demo_username, self._settings.demo_email
        )
        logger.info("event=demo_user_created user_id=%s", user.id)
        return user

    async def register_trial(self, username: str, email: str) -> User:
        username = username.strip()
        email = email.strip().lower()
        if not username:
            raise ValidationError("Username must not be empty")
        if "@" not in email:
            raise ValidationError("Invalid email address")
        if await self._users.get_by_email(email) is not None:
            raise ConflictError("A user with this email already exists")
        if await self._users.get_by_username(username) is not None:
            raise ConflictError("Username is already taken")
        user = await self._create_trial(username, email)
        logger.info("event=trial_registered user_id=%s", user.id)
        return user

    async def upgrade(self, user_id: str) -> User:
        user = await self._users.set_tier(user_id, SubscriptionTier.PRO)
        if user is None:
            raise NotFoundError("User not found")
        await self._commit()
        logger.info("event=user_upgraded user_id=%s", user_id)
        return user

    def subscription_status(self, user: User) -> dict[str, Any]:
        days_left: int | None = None
        if (
            user.subscription_tier == SubscriptionTier.TRIAL
            and user.trial_ends_at is not None
        ):
            ends = user.trial_ends_at
            if ends.tzinfo is None:
                ends = ends.replace(tzinfo=UTC)
            days_left = max(0, (ends - datetime.now(UTC)).days)
        return {
            "tier": user.subscription_tier,
            "trialExpired": user.trial_expired,
            "trialDaysLeft": days_left,
            "maxFilesPerUpload": (
                self._settings.trial_max_files
                if user.subscription_tier == SubscriptionTier.TRIAL
                else None
            ),
        }

    async def _create_trial(self, username: str, email: str) -> User:
        user = await self._users.create(
            User(
                username=username,
                email=email,
                subscription_tier=SubscriptionTier.TRIAL,
                trial_ends_at=datetime.now(UTC)
                + timedelta(days=self._settings.trial_days),
            )
        )
        await self._commit()
        return user
