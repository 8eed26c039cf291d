"""Stub user identity and subscription tier routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from codestruct.api.dependencies import get_current_user, get_user_service
from codestruct.api.schemas import APIResponse, UserRegister
from codestruct.models.user import User
from codestruct.services.user_service import UserService

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/user")
async def current_user(
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> APIResponse:
    """Return the demo user with its subscription status."""
    return APIResponse(
        success=True,
        data=user.to_dict(),
        metadata={"subscription": service.subscription_status(user)},
    )


@router.post("/user/upgrade")
async def upgrade_user(
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> APIResponse:
    """Move the current user to the pro tier (no payment flow)."""
    upgraded = await service.upgrade(user.id)
    return APIResponse(
        success=True,
        data=upgraded.to_dict(),
        metadata={"subscription": service.subscription_status(upgraded)},
    )


@router.post("/users")
async def register_user(
    body: UserRegister,
    service: UserService = Depends(get_user_service),
) -> APIResponse:
    """Register a new trial user."""
    user = await service.register_trial(body.username, body.email)
    return APIResponse(success=True, data=user.to_dict())
