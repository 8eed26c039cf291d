"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from codestruct import __version__
from codestruct.api.app_state import AppState
from codestruct.api.dependencies import get_app_state

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(
    state: AppState = Depends(get_app_state),
) -> dict[str, object]:
    """Basic health check for load balancers."""
    return {
        "status": "healthy",
        "version": __version__,
        "models": state.settings.litellm_model_chain,
        "timestamp": datetime.now(UTC).isoformat(),
    }
