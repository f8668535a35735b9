"""API routes for the current user."""

from fastapi import APIRouter, Depends

from neighborguard.api.dependencies import get_current_user, get_user_service
from neighborguard.api.schemas.users import MeResponse
from neighborguard.models import User
from neighborguard.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=MeResponse)
async def get_me(
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> MeResponse:
    """Get the caller and every circle they belong to."""
    return MeResponse.from_view(await service.build_me(user))
