"""Swipe API endpoints."""

from fastapi import APIRouter, HTTPException

from housewipe.api.dependencies import CurrentUser, FeedServiceDep
from housewipe.api.schemas import SwipeCreate, SwipeResponse

router = APIRouter()


@router.post("", response_model=SwipeResponse)
async def record_swipe(
    swipe: SwipeCreate,
    service: FeedServiceDep,
    user: CurrentUser,
) -> SwipeResponse:
    """Record a swipe. Right and super swipes also add a favorite.

    Raises:
        HTTPException: 404 if listing not found.
    """
    if not service.record_swipe(user.id, swipe.listing_id, swipe.direction):
        raise HTTPException(status_code=404, detail=f"Listing {swipe.listing_id} not found")
    return SwipeResponse(success=True, listing_id=swipe.listing_id, direction=swipe.direction)
