"""Project CRUD, upload and analysis routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, UploadFile

from codestruct.api.dependencies import (
    get_current_user,
    get_file_service,
    get_project_service,
)
from codestruct.api.schemas import APIResponse, ProjectCreate, ScanRequest
from codestruct.errors import NotFoundError, ValidationError
from codestruct.models.project import Project
from codestruct.models.user import User
from codestruct.services.file_service import FileService
from codestruct.services.project_service import ProjectService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


async def _owned_project(
    project_id: str, user: User, service: ProjectService
) -> Project:
    project = await service.require(project_id)
    if project.user_id != user.id:
        # Not revealing other users' projects
        raise NotFoundError("Project not found")
    return project


@router.get("")
async def list_projects(
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """List the current user's projects."""
    projects = await service.list_for_user(user.id)
    return APIResponse(
        success=True,
        data=[p.to_dict() for p in projects],
    )


@router.post("")
async def create_project(
    body: ProjectCreate,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Create an empty project."""
    project = await service.create(user, body.name)
    return APIResponse(success=True, data=project.to_dict())


@router.get("/{project_id}")
async def get_project(
    project_id: str,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> APIResponse:
    project = await _owned_project(project_id, user, service)
    return APIResponse(success=True, data=project.to_dict())


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Delete a project and all associated files and analyses."""
    await _owned_project(project_id, user, service)
    if not await service.delete(project_id):
        raise NotFoundError("Project not found")
    return APIResponse(success=True)


@router.post("/{project_id}/upload")
async def upload_files(
    project_id: str,
    files: list[UploadFile] = File(...),
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Replace the project's file set with the uploaded files."""
    await _owned_project(project_id, user, service)
    uploads: list[tuple[str, bytes]] = []
    for upload in files:
        if not upload.filename:
            raise ValidationError("Uploaded file is missing a filename")
        uploads.append((upload.filename, await upload.read()))
    summary = await service.upload(project_id, uploads)
    return APIResponse(
        success=True,
        data=summary.to_dict(),
    )


@router.post("/{project_id}/scan")
async def scan_directory(
    project_id: str,
    body: ScanRequest,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Collect a server-side directory into the project."""
    await _owned_project(project_id, user, service)
    summary = await service.scan_directory(project_id, body.path)
    return APIResponse(
        success=True,
        data=summary.to_dict(),
        metadata={"truncated": summary.truncated},
    )


@router.get("/{project_id}/files")
async def list_files(
    project_id: str,
    user: User = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
    files: FileService = Depends(get_file_service),
) -> APIResponse:
    await _owned_project(project_id, user, projects)
    records = await files.list_for_project(project_id)
    return APIResponse(
        success=True,
        data=[f.to_dict() for f in records],
    )


@router.post("/{project_id}/analyze")
async def analyze_project(
    project_id: str,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Run a codebase analysis and store the result.

    Succeeds even when the reasoning service fails; the stored
    result is then the fallback and ``metadata.fallback`` is true.
    """
    await _owned_project(project_id, user, service)
    run = await service.analyze(project_id)
    return APIResponse(
        success=True,
        data=run.analysis.to_dict(),
        metadata={"fallback": run.fallback},
    )


@router.get("/{project_id}/analysis")
async def latest_analysis(
    project_id: str,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Return the most recent analysis; 404 if none ran yet."""
    await _owned_project(project_id, user, service)
    analysis = await service.latest_analysis(project_id)
    if analysis is None:
        raise NotFoundError("No analysis found")
    return APIResponse(success=True, data=analysis.to_dict())
