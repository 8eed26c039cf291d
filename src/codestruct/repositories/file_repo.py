"""SQL implementation of FileRepository."""

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from codestruct.models.project_file import ProjectFile


class SqlFileRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, file_id: str) -> ProjectFile | None:
        result = await self._session.execute(
            select(ProjectFile).where(ProjectFile.id == file_id)
        )
        return result.scalar_one_or_none()

    async def list_by_project(
        self, project_id: str
    ) -> list[ProjectFile]:
        result = await self._session.execute(
            select(ProjectFile)
            .where(ProjectFile.project_id == project_id)
            .order_by(ProjectFile.path)
        )
        return list(result.scalars().all())

    async def replace_for_project(
        self, project_id: str, files: list[ProjectFile]
    ) -> list[ProjectFile]:
        """Delete every file of the project, then insert ``files``.

        Both statements run in the caller's transaction; nothing is
        visible to other sessions until the caller commits.
        """
        await self._session.execute(
            sa_delete(ProjectFile).where(
                ProjectFile.project_id == project_id
            )
        )
        await self._session.flush()
        for f in files:
            f.project_id = project_id
        self._session.add_all(files)
        await self._session.flush()
        return files

    async def update_content(
        self, file_id: str, content: str, size: int
    ) -> ProjectFile | None:
        file = await self.get_by_id(file_id)
        if file is None:
            return None
        file.content = content
        file.size = size
        await self._session.flush()
        return file

    async def delete(self, file_id: str) -> bool:
        result = await self._session.execute(
            sa_delete(ProjectFile).where(ProjectFile.id == file_id)
        )
        await self._session.flush()
        rowcount: int = getattr(result, "rowcount", 0) or 0
        return rowcount > 0

    async def delete_by_project(self, project_id: str) -> None:
        await self._session.execute(
            sa_delete(ProjectFile).where(
                ProjectFile.project_id == project_id
            )
        )
        await self._session.flush()
