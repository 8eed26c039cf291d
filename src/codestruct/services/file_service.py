"""Single-file operations: lookup, reasoning calls and patching."""

from __future__ import annotations

import logging

from codestruct.analysis.dispatcher import AnalysisDispatcher
from codestruct.analysis.llm.schemas import (
    DocumentationResult,
    FileReview,
    ImprovementResult,
)
from codestruct.errors import ConflictError, NotFoundError
from codestruct.models.project_file import ProjectFile
from codestruct.repositories.protocols import (
    Commit,
    FileRepository,
    ProjectRepository,
    noop_commit,
)
from codestruct.resilience.locks import KeyedLock
from codestruct.services.project_service import project_lock_key

logger = logging.getLogger(__name__)


class FileService:
    def __init__(
        self,
        files: FileRepository,
        projects: ProjectRepository,
        *,
        commit: Commit = noop_commit,
        dispatcher: AnalysisDispatcher | None = None,
        locks: KeyedLock | None = None,
    ) -> None:
        self._files = files
        self._projects = projects
        self._commit = commit
        self._dispatcher = dispatcher
        self._locks = locks or KeyedLock()

    async def get(self, file_id: str) -> ProjectFile | None:
        return await self._files.get_by_id(file_id)

    async def require(self, file_id: str) -> ProjectFile:
        file = await self._files.get_by_id(file_id)
        if file is None:
            raise NotFoundError("File not found")
        return file

    async def list_for_project(self, project_id: str) -> list[ProjectFile]:
        if await self._projects.get_by_id(project_id) is None:
            raise NotFoundError("Project not found")
        return await self._files.list_by_project(project_id)

    async def delete(self, file_id: str) -> bool:
        deleted = await self._files.delete(file_id)
        if deleted:
            await self._commit()
            logger.info("event=file_deleted file_id=%s", file_id)
        return deleted

    # ── Reasoning calls ──────────────────────────────────

    def _require_dispatcher(self) -> AnalysisDispatcher:
        if self._dispatcher is None:
            raise RuntimeError("FileService has no dispatcher")
        return self._dispatcher

    async def document(self, file_id: str) -> DocumentationResult:
        file = await self.require(file_id)
        return await self._require_dispatcher().document_file(
            file.content, file.path
        )

    async def improve(self, file_id: str) -> ImprovementResult:
        file = await self.require(file_id)
        return await self._require_dispatcher().improve_file(
            file.content, file.path
        )

    async def review(self, file_id: str) -> FileReview:
        file = await self.require(file_id)
        return await self._require_dispatcher().review_file(
            file.content, file.path
        )

    # ── Patch ────────────────────────────────────────────

    async def apply_patch(
        self,
        file_id: str,
        content: str,
        expected_content: str | None = None,
    ) -> ProjectFile | None:
        """Overwrite one file's content by identifier.

        Returns ``None`` for an unknown id and never creates a record.
        When ``expected_content`` is given it must equal the stored
        content, otherwise :class:`ConflictError` is raised and nothing
        changes. Only content, size and ``updated_at`` are touched.
        """
        file = await self._files.get_by_id(file_id)
        if file is None:
            return None

        async with self._locks.hold(project_lock_key(file.project_id)):
            # Re-read under the lock: an upload may have replaced the set
            current = await self._files.get_by_id(file_id)
            if current is None:
                return None
            if (
                expected_content is not None
                and current.content != expected_content
            ):
                logger.info(
                    "event=patch_conflict file_id=%s project_id=%s",
                    file_id,
                    current.project_id,
                )
                raise ConflictError(
                    "File content has changed since the edit was computed"
                )
            updated = await self._files.update_content(
                file_id, content, len(content.encode("utf-8"))
            )
            if updated is None:
                return None
            await self._commit()

        logger.info(
            "event=patch_applied file_id=%s project_id=%s size=%d",
            file_id,
            updated.project_id,
            updated.size or 0,
        )
        return updated
