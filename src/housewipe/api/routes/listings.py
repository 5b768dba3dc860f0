"""Listings feed API endpoints."""

from fastapi import APIRouter, HTTPException, Query

from housewipe.api.dependencies import CurrentUser, FeedServiceDep
from housewipe.api.schemas import FeedResponse
from housewipe.models.pydantic_models import FeedFilters, ListingDetail

router = APIRouter()


@router.get("", response_model=FeedResponse)
async def get_feed(
    service: FeedServiceDep,
    user: CurrentUser,
    min_price: int | None = Query(None, ge=0, description="Minimum price"),
    max_price: int | None = Query(None, ge=0, description="Maximum price"),
    min_beds: int | None = Query(None, ge=0, description="Minimum bedrooms"),
    min_baths: float | None = Query(None, ge=0, description="Minimum bathrooms"),
    province: str | None = Query(None, max_length=100, description="Province name"),
    limit: int = Query(50, ge=1, le=100, description="Results per page"),
    offset: int = Query(0, ge=0, description="Results to skip"),
) -> FeedResponse:
    """Get active listings the user has not swiped on yet.

    Newest listings come first; listings without a listing date follow,
    newest sighting first.
    """
    filters = FeedFilters(
        min_price=min_price,
        max_price=max_price,
        min_beds=min_beds,
        min_baths=min_baths,
        province=province,
    )
    listings = service.get_feed(user.id, filters=filters, limit=limit, offset=offset)
    return FeedResponse(listings=listings, count=len(listings), limit=limit, offset=offset)


@router.get("/{listing_id}", response_model=ListingDetail)
async def get_listing(
    listing_id: int,
    service: FeedServiceDep,
    user: CurrentUser,
) -> ListingDetail:
    """Get a listing with its price history and the user's favorite notes.

    Raises:
        HTTPException: 404 if listing not found.
    """
    listing = service.get_listing_detail(listing_id, user_id=user.id)
    if listing is None:
        raise HTTPException(status_code=404, detail=f"Listing {listing_id} not found")
    return listing
