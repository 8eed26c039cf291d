"""SQL implementation of ProjectRepository."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codestruct.models.project import Project


class SqlProjectRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, project_id: str) -> Project | None:
        result = await self._session.execute(
            select(Project).where(Project.id == project_id)
        )
        return result.scalar_one_or_none()

    async def list_by_user(self, user_id: str) -> list[Project]:
        result = await self._session.execute(
            select(Project)
            .where(Project.user_id == user_id)
            .order_by(Project.created_at.desc())
        )
        return list(result.scalars().all())

    async def create(self, project: Project) -> Project:
        self._session.add(project)
        await self._session.flush()
        return project

    async def update_counters(
        self,
        project_id: str,
        *,
        file_count: int,
        language_count: int,
        lines_processed: int,
        last_scan_at: datetime,
    ) -> Project | None:
        project = await self.get_by_id(project_id)
        if project is None:
            return None
        project.file_count = file_count
        project.language_count = language_count
        project.lines_processed = lines_processed
        project.last_scan_at = last_scan_at
        await self._session.flush()
        return project

    async def delete(self, project_id: str) -> bool:
        """Delete the project row only.

        Callers remove files and analyses first through their own
        repositories.
        """
        project = await self.get_by_id(project_id)
        if project is None:
            return False
        await self._session.delete(project)
        await self._session.flush()
        return True
