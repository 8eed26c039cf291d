"""Project lifecycle, file-set replacement and codebase analysis."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from codestruct.analysis.dispatcher import AnalysisDispatcher
from codestruct.config import Settings
from codestruct.constants import SubscriptionTier
from codestruct.errors import NotFoundError, ValidationError
from codestruct.ingestion import count_lines, language_for
from codestruct.ingestion.collector import collect_files
from codestruct.ingestion.schemas import FileRecord
from codestruct.models.analysis import Analysis
from codestruct.models.project import Project
from codestruct.models.project_file import ProjectFile
from codestruct.models.user import User
from codestruct.repositories.protocols import (
    AnalysisRepository,
    Commit,
    FileRepository,
    ProjectRepository,
    UserRepository,
    noop_commit,
)
from codestruct.resilience.locks import KeyedLock

logger = logging.getLogger(__name__)


def project_lock_key(project_id: str) -> str:
    return f"project:{project_id}"


@dataclass
class UploadSummary:
    """Outcome of one full-replace upload."""

    project: Project
    files: list[ProjectFile]
    truncated: bool = False
    skipped: list[str] = field(default_factory=lambda: list[str]())

    def to_dict(self) -> dict[str, object]:
        return {
            "fileCount": self.project.file_count,
            "languageCount": self.project.language_count,
            "linesProcessed": self.project.lines_processed,
            "project": self.project.to_dict(),
            "files": [f.to_dict(include_content=False) for f in self.files],
            "truncated": self.truncated,
            "skipped": self.skipped,
        }


@dataclass
class AnalysisRun:
    """A persisted analysis plus whether the fallback result was used."""

    analysis: Analysis
    fallback: bool


def normalize_upload_path(path: str) -> str:
    """Return ``path`` as a clean relative '/'-separated path.

    Raises :class:`ValidationError` for empty, absolute or
    parent-escaping paths.
    """
    cleaned = path.replace("\\", "/").strip()
    if not cleaned:
        raise ValidationError("File path must not be empty")
    if cleaned.startswith("/") or (len(cleaned) > 1 and cleaned[1] == ":"):
        raise ValidationError(f"File path must be relative: {path}")
    parts = [p for p in cleaned.split("/") if p not in ("", ".")]
    if not parts:
        raise ValidationError(f"Invalid file path: {path}")
    if ".." in parts:
        raise ValidationError(f"File path escapes the project: {path}")
    return "/".join(parts)


class ProjectService:
    """Owns project CRUD and the atomic full-replace upload.

    Every replacement of a project's file set runs under a per-project
    lock and inside a single transaction ended by ``commit``; if any
    step raises, nothing is committed and the previous file set stays.
    """

    def __init__(
        self,
        projects: ProjectRepository,
        files: FileRepository,
        analyses: AnalysisRepository,
        users: UserRepository,
        *,
        commit: Commit = noop_commit,
        dispatcher: AnalysisDispatcher | None = None,
        locks: KeyedLock | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._projects = projects
        self._files = files
        self._analyses = analyses
        self._users = users
        self._commit = commit
        self._dispatcher = dispatcher
        self._locks = locks or KeyedLock()
        self._settings = settings or Settings()

    # ── CRUD ─────────────────────────────────────────────

    async def create(self, owner: User, name: str) -> Project:
        name = name.strip()
        if not name:
            raise ValidationError("Project name must not be empty")
        project = await self._projects.create(
            Project(
                user_id=owner.id,
                name=name,
                file_count=0,
                language_count=0,
                lines_processed=0,
                last_scan_at=None,
            )
        )
        await self._commit()
        logger.info(
            "event=project_created project_id=%s user_id=%s",
            project.id,
            owner.id,
        )
        return project

    async def get(self, project_id: str) -> Project | None:
        return await self._projects.get_by_id(project_id)

    async def require(self, project_id: str) -> Project:
        project = await self._projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    async def list_for_user(self, user_id: str) -> list[Project]:
        return await self._projects.list_by_user(user_id)

    async def delete(self, project_id: str) -> bool:
        """Delete a project with its files and analyses.

        Children go first, in the same transaction as the project row.
        """
        async with self._locks.hold(project_lock_key(project_id)):
            if await self._projects.get_by_id(project_id) is None:
                return False
            await self._analyses.delete_by_project(project_id)
            await self._files.delete_by_project(project_id)
            if not await self._projects.delete(project_id):
                return False
            await self._commit()
        logger.info("event=project_deleted project_id=%s", project_id)
        return True

    # ── Upload ───────────────────────────────────────────

    async def replace_files(
        self, project_id: str, records: Sequence[FileRecord]
    ) -> UploadSummary:
        """Replace the project's whole file set with ``records``.

        Counters are recomputed from the new set in the same
        transaction, so they always match the stored files.
        """
        project = await self.require(project_id)
        if not records:
            raise ValidationError("No files provided")

        seen: set[str] = set()
        rows: list[ProjectFile] = []
        for record in records:
            path = normalize_upload_path(record.path)
            if path in seen:
                raise ValidationError(f"Duplicate file path: {path}")
            seen.add(path)
            rows.append(
                ProjectFile(
                    path=path,
                    content=record.content,
                    language=record.language,
                    size=record.size or len(record.content.encode("utf-8")),
                )
            )

        await self._check_file_cap(project, len(rows))

        async with self._locks.hold(project_lock_key(project_id)):
            stored = await self._files.replace_for_project(project_id, rows)
            updated = await self._projects.update_counters(
                project_id,
                file_count=len(stored),
                language_count=len({f.language for f in stored}),
                lines_processed=sum(count_lines(f.content) for f in stored),
                last_scan_at=datetime.now(UTC),
            )
            if updated is None:
                # Deleted between the lookup and the lock
                raise NotFoundError("Project not found")
            await self._commit()

        logger.info(
            "event=files_replaced project_id=%s files=%d languages=%d"
            " lines=%d",
            project_id,
            updated.file_count,
            updated.language_count,
            updated.lines_processed,
        )
        return UploadSummary(project=updated, files=stored)

    async def upload(
        self, project_id: str, uploads: Sequence[tuple[str, bytes]]
    ) -> UploadSummary:
        """Store raw uploaded ``(path, bytes)`` pairs as the file set."""
        records = [
            FileRecord(
                path=path,
                content=data.decode("utf-8", errors="replace"),
                language=language_for(path),
                size=len(data),
            )
            for path, data in uploads
        ]
        return await self.replace_files(project_id, records)

    async def scan_directory(
        self, project_id: str, path: str
    ) -> UploadSummary:
        """Collect a server-side directory into the project.

        The directory must sit below ``browse_root``. The collector
        runs in a worker thread and is capped at ``trial_max_files``.
        """
        await self.require(project_id)
        root = (
            Path(self._settings.browse_root).expanduser()
            if self._settings.browse_root
            else Path.home()
        ).resolve()
        target = Path(path).expanduser().resolve()
        if not target.is_relative_to(root):
            raise ValidationError("Path is outside the allowed browse root")
        if not target.is_dir():
            raise ValidationError(f"Not a directory: {path}")

        collected = await asyncio.to_thread(
            collect_files, target, self._settings
        )
        if not collected.files:
            raise ValidationError("No source files found in directory")

        summary = await self.replace_files(project_id, collected.files)
        summary.truncated = collected.truncated
        summary.skipped = collected.skipped
        return summary

    async def _check_file_cap(self, project: Project, count: int) -> None:
        owner = await self._users.get_by_id(project.user_id)
        if owner is None or owner.subscription_tier != SubscriptionTier.TRIAL:
            return
        cap = self._settings.trial_max_files
        if count > cap:
            raise ValidationError(
                f"Trial accounts can upload at most {cap} files"
                f" per project (got {count})"
            )

    # ── Analysis ─────────────────────────────────────────

    async def analyze(self, project_id: str) -> AnalysisRun:
        """Run a codebase analysis and persist it as a new record.

        Upstream failures never surface here: the dispatcher
        substitutes the fallback result, which is stored as usual.
        """
        if self._dispatcher is None:
            raise RuntimeError("ProjectService has no dispatcher")
        await self.require(project_id)
        files = await self._files.list_by_project(project_id)
        if not files:
            raise ValidationError("Project has no files to analyze")

        result = await self._dispatcher.analyze_codebase(files)
        dumped = result.model_dump(
            by_alias=True, mode="json", exclude_none=True
        )
        analysis = await self._analyses.create(
            Analysis(
                project_id=project_id,
                detected_languages=dict(result.detected_languages),
                architecture=result.architecture,
                issues=dumped["issues"],
                suggestions=dumped["suggestions"],
                created_at=datetime.now(UTC),
            )
        )
        await self._commit()
        logger.info(
            "event=analysis_stored project_id=%s analysis_id=%s"
            " issues=%d suggestions=%d fallback=%s",
            project_id,
            analysis.id,
            len(result.issues),
            len(result.suggestions),
            result.is_fallback,
        )
        return AnalysisRun(analysis=analysis, fallback=result.is_fallback)

    async def latest_analysis(self, project_id: str) -> Analysis | None:
        await self.require(project_id)
        return await self._analyses.get_latest(project_id)
