"""Single-file routes: read, delete, patch and reasoning calls."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from codestruct.api.dependencies import (
    get_current_user,
    get_file_service,
    get_project_service,
)
from codestruct.api.schemas import APIResponse, PatchFile
from codestruct.errors import NotFoundError
from codestruct.models.project_file import ProjectFile
from codestruct.models.user import User
from codestruct.services.file_service import FileService
from codestruct.services.project_service import ProjectService

router = APIRouter(prefix="/api/files", tags=["files"])


async def _owned_file(
    file_id: str,
    user: User,
    files: FileService,
    projects: ProjectService,
) -> ProjectFile:
    file = await files.require(file_id)
    project = await projects.get(file.project_id)
    if project is None or project.user_id != user.id:
        raise NotFoundError("File not found")
    return file


@router.get("/{file_id}")
async def get_file(
    file_id: str,
    user: User = Depends(get_current_user),
    files: FileService = Depends(get_file_service),
    projects: ProjectService = Depends(get_project_service),
) -> APIResponse:
    file = await _owned_file(file_id, user, files, projects)
    return APIResponse(success=True, data=file.to_dict())


@router.delete("/{file_id}")
async def delete_file(
    file_id: str,
    user: User = Depends(get_current_user),
    files: FileService = Depends(get_file_service),
    projects: ProjectService = Depends(get_project_service),
) -> APIResponse:
    await _owned_file(file_id, user, files, projects)
    if not await files.delete(file_id):
        raise NotFoundError("File not found")
    return APIResponse(success=True)


@router.patch("/{file_id}")
async def patch_file(
    file_id: str,
    body: PatchFile,
    user: User = Depends(get_current_user),
    files: FileService = Depends(get_file_service),
    projects: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Apply an accepted edit to exactly this file."""
    await _owned_file(file_id, user, files, projects)
    updated = await files.apply_patch(
        file_id, body.content, body.expected_content
    )
    if updated is None:
        raise NotFoundError("File not found")
    return APIResponse(success=True, data=updated.to_dict())


@router.post("/{file_id}/document")
async def document_file(
    file_id: str,
    user: User = Depends(get_current_user),
    files: FileService = Depends(get_file_service),
    projects: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Generate a documented version of the file (not saved)."""
    await _owned_file(file_id, user, files, projects)
    result = await files.document(file_id)
    return APIResponse(
        success=True, data=result.model_dump(by_alias=True, mode="json")
    )


@router.post("/{file_id}/improve")
async def improve_file(
    file_id: str,
    user: User = Depends(get_current_user),
    files: FileService = Depends(get_file_service),
    projects: ProjectService = Depends(get_project_service),
) -> APIResponse:
    """Suggest an improved version of the file (not saved)."""
    await _owned_file(file_id, user, files, projects)
    result = await files.improve(file_id)
    return APIResponse(
        success=True, data=result.model_dump(by_alias=True, mode="json")
    )


@router.post("/{file_id}/review")
async def review_file(
    file_id: str,
    user: User = Depends(get_current_user),
    files: FileService = Depends(get_file_service),
    projects: ProjectService = Depends(get_project_service),
) -> APIResponse:
    await _owned_file(file_id, user, files, projects)
    result = await files.review(file_id)
    return APIResponse(
        success=True, data=result.model_dump(by_alias=True, mode="json")
    )
