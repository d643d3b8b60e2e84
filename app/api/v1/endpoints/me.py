"""Signed-in user."""

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.v1.dependencies import CurrentUser, get_user_service
from app.application.use_cases.users import UserService
from app.schemas.user import MeResponse, UserResponse

router = APIRouter()


@router.get("", response_model=MeResponse)
async def get_me(
    auth: CurrentUser,
    user_svc: Annotated[UserService, Depends(get_user_service)],
):
    """Profile of the caller plus the organization and role of the session."""
    user = await user_svc.get_me(auth.user_id)
    return MeResponse(
        user=UserResponse.model_validate(user),
        organization_id=auth.organization_id,
        org_role=auth.org_role,
        is_coach=auth.is_coach,
    )
