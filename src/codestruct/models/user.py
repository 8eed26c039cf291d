"""User ORM model."""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import String, func
from sqlalchemy.orm import Mapped, mapped_column

from codestruct.constants import SubscriptionTier
from codestruct.models.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    username: Mapped[str] = mapped_column(String(200), unique=True)
    email: Mapped[str] = mapped_column(String(320), unique=True)
    subscription_tier: Mapped[str] = mapped_column(
        String(20), default=SubscriptionTier.TRIAL
    )
    trial_ends_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    @property
    def trial_expired(self) -> bool:
        if self.subscription_tier != SubscriptionTier.TRIAL:
            return False
        if self.trial_ends_at is None:
            return False
        ends = self.trial_ends_at
        if ends.tzinfo is None:
            # SQLite drops tzinfo on round-trip
            ends = ends.replace(tzinfo=UTC)
        return ends <= datetime.now(UTC)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "subscriptionTier": self.subscription_tier,
            "trialEndsAt": (
                self.trial_ends_at.isoformat()
                if self.trial_ends_at
                else None
            ),
            "trialExpired": self.trial_expired,
            "createdAt": self.created_at.isoformat(),
        }
