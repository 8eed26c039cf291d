"""SQL implementation of UserRepository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codestruct.models.user import User


class SqlUserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self._session.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        result = await self._session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def create(self, user: User) -> User:
        self._session.add(user)
        await self._session.flush()
        return user

    async def set_tier(self, user_id: str, tier: str) -> User | None:
        user = await self.get_by_id(user_id)
        if user is None:
            return None
        user.subscription_tier = tier
        await self._session.flush()
        return user
