"""Service layer for reconciliation passes."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError

from housewipe.config import Settings
from housewipe.database.engine import Database
from housewipe.database.repository import ListingRepository, ScrapeRunRepository
from housewipe.enrichment.geocoder import Geocoder
from housewipe.models.pydantic_models import ListingSnapshot, ScrapeRunRead, utc_now
from housewipe.scrapers.base import BaseExtractor, parse_snapshot
from housewipe.services.alert_service import AlertDeriver
from housewipe.services.reconciler import Reconciler, ReconcileTally

logger = logging.getLogger(__name__)


class ScrapeRunInProgressError(RuntimeError):
    """Raised when a pass is requested while another one is running."""

    def __init__(self, run_id: int) -> None:
        super().__init__(f"Scrape run {run_id} is still running")
        self.run_id = run_id


class EmptyExtractionError(RuntimeError):
    """Raised when the extractor yields no valid listing."""


class StoreUnavailableError(RuntimeError):
    """Raised when too many consecutive upserts fail."""


def _describe(error: BaseException) -> str:
    if isinstance(error, asyncio.CancelledError):
        return "Cancelled"
    if isinstance(error, KeyboardInterrupt):
        return "Interrupted"
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


class ScrapeCoordinator:
    """Runs one reconciliation pass from extraction to retirement.

    Owns the ScrapeRun lifecycle: a run is opened before any listing is
    touched and always leaves the running state, whatever ends the pass.
    """

    def __init__(
        self,
        database: Database,
        settings: Settings | None = None,
        reconciler: Reconciler | None = None,
        geocoder: Geocoder | None = None,
    ) -> None:
        """Initialize with the store handle and settings.

        Args:
            database: Store handle.
            settings: Application settings. Defaults apply when omitted.
            reconciler: Reconciler to use. Built with an AlertDeriver for the
                configured alert policy when omitted.
            geocoder: Optional geocoder for snapshots without coordinates.
        """
        self._database = database
        self._settings = settings or Settings()
        self._reconciler = reconciler or Reconciler(
            database,
            AlertDeriver(database, self._settings.reconcile.alert_policy),
        )
        self._geocoder = geocoder

    async def run_pass(self, extractor: BaseExtractor, now: datetime | None = None) -> ScrapeRunRead:
        """Run a full pass over the extractor's listings.

        Args:
            extractor: Source of raw listing records.
            now: Pass time recorded as last_seen_at. Defaults to the current UTC time.

        Returns:
            The completed ScrapeRun.

        Raises:
            ScrapeRunInProgressError: If another pass is running.
            EmptyExtractionError: If nothing valid was extracted and
                fail_on_empty is set.
            StoreUnavailableError: If consecutive upsert failures reach
                max_consecutive_failures.
        """
        options = self._settings.reconcile
        now = now or utc_now()
        run_id = self._start_run(now)
        logger.info("Starting scrape run %d from %s", run_id, extractor.name)

        async with self._scoped_run(run_id) as tally:
            snapshots = await self._collect_snapshots(extractor)
            if not snapshots and options.fail_on_empty:
                raise EmptyExtractionError(f"{extractor.name} yielded no valid listings")

            if self._geocoder is not None:
                snapshots = await self._geocode_missing(snapshots)

            for snapshot in snapshots:
                self._reconciler.reconcile_into(tally, snapshot, now=now)
                if tally.consecutive_failures >= options.max_consecutive_failures:
                    raise StoreUnavailableError(
                        f"{tally.consecutive_failures} consecutive listing updates failed"
                    )

            retired = self._retire(tally, now)
            run = self._complete_run(run_id, tally, retired)

        logger.info(
            "Scrape run %d completed: %d found, %d new, %d updated, "
            "%d price changes, %d failed, %d retired",
            run.id,
            run.listings_found,
            run.listings_new,
            run.listings_updated,
            run.price_changes,
            run.listings_failed,
            run.listings_retired,
        )
        return run

    def _start_run(self, now: datetime) -> int:
        stale_after = timedelta(hours=self._settings.reconcile.stale_run_hours)
        with self._database.session() as session:
            repo = ScrapeRunRepository(session)
            reaped = repo.fail_stale_runs(stale_after, now=now)
            if reaped:
                logger.warning("Marked %d abandoned scrape run(s) as failed", reaped)

            running = repo.get_running_run()
            if running is not None:
                raise ScrapeRunInProgressError(running.id)

            try:
                return repo.create_run(now=now).id
            except IntegrityError:
                # Another process opened a run between the check and the insert
                running = repo.get_running_run()
                if running is None:
                    raise
                raise ScrapeRunInProgressError(running.id) from None

    @asynccontextmanager
    async def _scoped_run(self, run_id: int) -> AsyncIterator[ReconcileTally]:
        """Yield the pass tally; fail the run on any exit by exception."""
        tally = ReconcileTally()
        try:
            yield tally
        except BaseException as e:
            self._fail_run(run_id, e, tally)
            raise

    def _fail_run(self, run_id: int, error: BaseException, tally: ReconcileTally) -> None:
        detail = _describe(error)
        logger.error("Scrape run %d failed: %s", run_id, detail)
        try:
            with self._database.session() as session:
                ScrapeRunRepository(session).fail_run(
                    run_id, detail, stats=tally.to_stats(), errors=tally.errors
                )
        except Exception:
            logger.exception("Could not record failure of scrape run %d", run_id)

    def _complete_run(self, run_id: int, tally: ReconcileTally, retired: int) -> ScrapeRunRead:
        with self._database.session() as session:
            run = ScrapeRunRepository(session).complete_run(
                run_id, tally.to_stats(retired=retired), errors=tally.errors
            )
            return ScrapeRunRead.model_validate(run)

    def _retire(self, tally: ReconcileTally, now: datetime) -> int:
        if not tally.active_urls:
            logger.warning("No listing reconciled successfully; skipping retirement")
            return 0

        grace = timedelta(hours=self._settings.reconcile.retirement_grace_hours)
        with self._database.session() as session:
            retired = ListingRepository(session).retire_missing_listings(
                tally.active_urls, grace, now=now
            )
        if retired:
            logger.info("Retired %d listing(s) no longer on the source", retired)
        return retired

    async def _collect_snapshots(self, extractor: BaseExtractor) -> list[ListingSnapshot]:
        """Validate raw records, keeping the first snapshot per source URL."""
        snapshots: list[ListingSnapshot] = []
        seen: set[str] = set()
        skipped = 0
        duplicates = 0

        async for raw in extractor.iter_raw():
            snapshot = parse_snapshot(raw)
            if snapshot is None:
                skipped += 1
                continue
            if snapshot.source_url in seen:
                duplicates += 1
                continue
            seen.add(snapshot.source_url)
            snapshots.append(snapshot)

        logger.info(
            "Extracted %d listing(s) (%d invalid skipped, %d duplicates dropped)",
            len(snapshots),
            skipped,
            duplicates,
        )
        return snapshots

    async def _geocode_missing(self, snapshots: list[ListingSnapshot]) -> list[ListingSnapshot]:
        """Fill in coordinates for snapshots that lack them."""
        assert self._geocoder is not None
        delay = self._settings.geocoding.delay_seconds
        enriched: list[ListingSnapshot] = []

        for snapshot in snapshots:
            if snapshot.has_coordinates:
                enriched.append(snapshot)
                continue

            try:
                coords = await self._geocoder.geocode(snapshot.full_address)
            except Exception:
                logger.exception("Geocoding failed for %s", snapshot.source_url)
                coords = None

            if coords is not None:
                snapshot = snapshot.model_copy(update={"lat": coords.lat, "lng": coords.lng})
            enriched.append(snapshot)

            if delay:
                await asyncio.sleep(delay)

        return enriched
