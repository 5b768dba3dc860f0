"""Current user and statistics API endpoints."""

from fastapi import APIRouter

from housewipe.api.dependencies import CurrentUser, FeedServiceDep
from housewipe.models.pydantic_models import UserRead, UserStats

router = APIRouter()


@router.get("/me", response_model=UserRead)
async def get_me(user: CurrentUser) -> UserRead:
    return user


@router.get("/stats", response_model=UserStats)
async def get_stats(service: FeedServiceDep, user: CurrentUser) -> UserStats:
    """Get the user's swipe counts by direction, favorites and unread alerts."""
    return service.get_user_stats(user.id)
