"""SQL implementation of AnalysisRepository."""

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codestruct.models.analysis import Analysis


class SqlAnalysisRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, analysis: Analysis) -> Analysis:
        self._session.add(analysis)
        await self._session.flush()
        return analysis

    async def get_latest(self, project_id: str) -> Analysis | None:
        result = await self._session.execute(
            select(Analysis)
            .where(Analysis.project_id == project_id)
            .order_by(Analysis.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def delete_by_project(self, project_id: str) -> None:
        await self._session.execute(
            sa_delete(Analysis).where(Analysis.project_id == project_id)
        )
        await self._session.flush()
