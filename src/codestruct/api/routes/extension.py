"""Stateless endpoints used by the editor extension.

Nothing here touches the project store: files arrive in the request
body and results go straight back.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from codestruct.analysis.dispatcher import AnalysisDispatcher
from codestruct.api.app_state import AppState
from codestruct.api.dependencies import get_app_state, get_dispatcher
from codestruct.api.schemas import (
    APIResponse,
    ExtensionAnalyzeRequest,
    ExtensionFileRequest,
)
from codestruct.errors import ValidationError
from codestruct.ingestion import language_for
from codestruct.ingestion.schemas import FileRecord
from codestruct.services.project_service import normalize_upload_path

router = APIRouter(prefix="/api/extension", tags=["extension"])


@router.post("/analyze")
async def analyze_files(
    body: ExtensionAnalyzeRequest,
    state: AppState = Depends(get_app_state),
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
) -> APIResponse:
    """Analyze a batch of files sent by the extension."""
    cap = state.settings.trial_max_files
    if len(body.files) > cap:
        raise ValidationError(
            f"At most {cap} files can be analyzed per request"
        )
    records = [
        FileRecord(
            path=normalize_upload_path(f.path),
            content=f.content,
            language=f.language or language_for(f.path),
        )
        for f in body.files
    ]
    result = await dispatcher.analyze_codebase(records)
    return APIResponse(
        success=True,
        data=result.model_dump(by_alias=True, mode="json"),
        metadata={"fallback": result.is_fallback},
    )


@router.post("/analyze-file")
async def analyze_file(
    body: ExtensionFileRequest,
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
) -> APIResponse:
    result = await dispatcher.review_file(body.content, body.file_name)
    return APIResponse(
        success=True, data=result.model_dump(by_alias=True, mode="json")
    )


@router.post("/generate-docs")
async def generate_docs(
    body: ExtensionFileRequest,
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
) -> APIResponse:
    result = await dispatcher.document_file(body.content, body.file_name)
    return APIResponse(
        success=True, data=result.model_dump(by_alias=True, mode="json")
    )


@router.post("/improve")
async def improve(
    body: ExtensionFileRequest,
    dispatcher: AnalysisDispatcher = Depends(get_dispatcher),
) -> APIResponse:
    result = await dispatcher.improve_file(body.content, body.file_name)
    return APIResponse(
        success=True, data=result.model_dump(by_alias=True, mode="json")
    )
