"""Saved search API endpoints."""

from fastapi import APIRouter, HTTPException

from housewipe.api.dependencies import CurrentUser, FeedServiceDep
from housewipe.api.schemas import DeleteResponse, SavedSearchListResponse
from housewipe.models.pydantic_models import SavedSearchCreate, SavedSearchRead

router = APIRouter()


@router.get("", response_model=SavedSearchListResponse)
async def list_searches(service: FeedServiceDep, user: CurrentUser) -> SavedSearchListResponse:
    searches = service.get_saved_searches(user.id)
    return SavedSearchListResponse(searches=searches, count=len(searches))


@router.post("", status_code=201, response_model=SavedSearchRead)
async def create_search(
    search: SavedSearchCreate,
    service: FeedServiceDep,
    user: CurrentUser,
) -> SavedSearchRead:
    """Create a saved search. Enabled searches raise alerts for matching listings."""
    return service.create_saved_search(user.id, search)


@router.delete("/{search_id}", response_model=DeleteResponse)
async def delete_search(
    search_id: int,
    service: FeedServiceDep,
    user: CurrentUser,
) -> DeleteResponse:
    """Delete one of the user's saved searches.

    Raises:
        HTTPException: 404 if not found or owned by another user.
    """
    if not service.delete_saved_search(search_id, user.id):
        raise HTTPException(status_code=404, detail=f"Saved search {search_id} not found")
    return DeleteResponse(success=True, message=f"Saved search {search_id} deleted")
