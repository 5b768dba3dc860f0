"""Scraper ingestion API endpoints."""

from fastapi import APIRouter, HTTPException, Query

from housewipe.api.dependencies import DatabaseDep, DbSession, SettingsDep
from housewipe.api.schemas import IngestRequest, ScrapeRunListResponse
from housewipe.database.repository import ScrapeRunRepository
from housewipe.enrichment.geocoder import open_geocoder
from housewipe.models.pydantic_models import ScrapeRunRead
from housewipe.scrapers.payload import PayloadExtractor
from housewipe.services.scrape_service import (
    EmptyExtractionError,
    ScrapeCoordinator,
    ScrapeRunInProgressError,
    StoreUnavailableError,
)

router = APIRouter()


@router.post("/listings", response_model=ScrapeRunRead)
async def ingest_listings(
    request: IngestRequest,
    database: DatabaseDep,
    settings: SettingsDep,
) -> ScrapeRunRead:
    """Run one reconciliation pass over posted listings.

    Listings missing from the payload are retired once they fall outside
    the grace window.

    Raises:
        HTTPException: 409 if a pass is already running, 422 if no posted
            listing is valid, 503 if the store keeps failing.
    """
    async with open_geocoder(settings.geocoding) as geocoder:
        coordinator = ScrapeCoordinator(database, settings, geocoder=geocoder)
        try:
            return await coordinator.run_pass(PayloadExtractor(request.listings))
        except ScrapeRunInProgressError as e:
            raise HTTPException(status_code=409, detail=str(e)) from None
        except EmptyExtractionError:
            raise HTTPException(status_code=422, detail="No valid listings in payload") from None
        except StoreUnavailableError:
            raise HTTPException(status_code=503, detail="Listing store unavailable") from None


@router.get("/runs", response_model=ScrapeRunListResponse)
async def list_runs(
    session: DbSession,
    limit: int = Query(20, ge=1, le=100, description="Maximum runs to return"),
) -> ScrapeRunListResponse:
    """Get recent scrape runs, newest first."""
    runs = ScrapeRunRepository(session).get_recent_runs(limit=limit)
    return ScrapeRunListResponse(
        runs=[ScrapeRunRead.model_validate(run) for run in runs],
        count=len(runs),
    )
