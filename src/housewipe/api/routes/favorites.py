"""Favorites API endpoints."""

from fastapi import APIRouter, HTTPException, Query

from housewipe.api.dependencies import CurrentUser, FeedServiceDep
from housewipe.api.schemas import DeleteResponse, FavoriteListResponse, FavoriteUpdate
from housewipe.models.pydantic_models import FavoriteRead

router = APIRouter()


@router.get("", response_model=FavoriteListResponse)
async def list_favorites(
    service: FeedServiceDep,
    user: CurrentUser,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> FavoriteListResponse:
    """Get the user's favorites with price history, newest first."""
    favorites = service.get_favorites(user.id, limit=limit, offset=offset)
    return FavoriteListResponse(favorites=favorites, count=len(favorites))


@router.put("/{listing_id}", response_model=FavoriteRead)
async def update_favorite(
    listing_id: int,
    update: FavoriteUpdate,
    service: FeedServiceDep,
    user: CurrentUser,
) -> FavoriteRead:
    """Update notes, rating and price alerts on a favorite.

    Raises:
        HTTPException: 404 if the listing is not a favorite.
    """
    favorite = service.update_favorite(
        user.id,
        listing_id,
        notes=update.notes,
        rating=update.rating,
        alerts_enabled=update.alerts_enabled,
    )
    if favorite is None:
        raise HTTPException(status_code=404, detail=f"Favorite {listing_id} not found")
    return favorite


@router.delete("/{listing_id}", response_model=DeleteResponse)
async def remove_favorite(
    listing_id: int,
    service: FeedServiceDep,
    user: CurrentUser,
) -> DeleteResponse:
    """Remove a listing from the user's favorites.

    Raises:
        HTTPException: 404 if the listing is not a favorite.
    """
    if not service.remove_favorite(user.id, listing_id):
        raise HTTPException(status_code=404, detail=f"Favorite {listing_id} not found")
    return DeleteResponse(success=True, message=f"Favorite {listing_id} removed")
