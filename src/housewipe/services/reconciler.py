"""Reconciliation of listing snapshots against the store."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from housewipe.database.engine import Database
from housewipe.database.repository import ListingRepository
from housewipe.models.pydantic_models import ListingSnapshot, PassStats, ReconcileResult
from housewipe.services.alert_service import AlertDeriver

logger = logging.getLogger(__name__)


@dataclass
class ReconcileTally:
    """Statistics accumulated over one pass."""

    found: int = 0
    new: int = 0
    updated: int = 0
    price_changes: int = 0
    failed: int = 0
    active_urls: set[str] = field(default_factory=set)
    errors: list[str] = field(default_factory=list)
    consecutive_failures: int = 0

    def record(self, result: ReconcileResult) -> None:
        self.found += 1
        self.consecutive_failures = 0
        self.active_urls.add(result.source_url)
        if result.is_new:
            self.new += 1
        elif result.price_changed:
            self.price_changes += 1
        else:
            self.updated += 1

    def record_failure(self, source_url: str, error: BaseException) -> None:
        self.found += 1
        self.failed += 1
        self.consecutive_failures += 1
        self.errors.append(f"{source_url}: {type(error).__name__}: {error}")

    def to_stats(self, retired: int = 0) -> PassStats:
        return PassStats(
            found=self.found,
            new=self.new,
            updated=self.updated,
            price_changes=self.price_changes,
            failed=self.failed,
            retired=retired,
        )


class Reconciler:
    """Decides per snapshot whether a listing is new, repriced or unchanged.

    Every store write goes through ListingRepository.upsert_listing in its
    own session, so a failure never leaves a partial listing behind.
    """

    def __init__(self, database: Database, alert_deriver: AlertDeriver | None = None) -> None:
        """Initialize with the store handle.

        Args:
            database: Store handle.
            alert_deriver: Optional deriver invoked after each successful upsert.
        """
        self._database = database
        self._alert_deriver = alert_deriver

    def reconcile(self, snapshot: ListingSnapshot, now: datetime | None = None) -> ReconcileResult:
        """Upsert one snapshot and derive its alerts.

        Args:
            snapshot: Validated snapshot.
            now: Observation time recorded on the listing.

        Returns:
            ReconcileResult for the snapshot.

        Raises:
            SQLAlchemyError: If the store operation fails.
        """
        with self._database.session() as session:
            upsert = ListingRepository(session).upsert_listing(snapshot, now=now)

        result = ReconcileResult(
            listing_id=upsert.listing_id,
            source_url=snapshot.source_url,
            is_new=upsert.is_new,
            price_changed=upsert.price_changed,
            old_price=upsert.old_price,
            new_price=upsert.new_price,
        )

        if result.price_changed:
            logger.info(
                "Price change for listing %d: %s -> %s",
                result.listing_id,
                result.old_price,
                result.new_price,
            )

        if self._alert_deriver is not None:
            try:
                self._alert_deriver.derive(result)
            except Exception:
                logger.exception("Alert derivation failed for listing %d", result.listing_id)

        return result

    def reconcile_into(
        self,
        tally: ReconcileTally,
        snapshot: ListingSnapshot,
        now: datetime | None = None,
    ) -> ReconcileResult | None:
        """Reconcile one snapshot, recording the outcome in a tally.

        Store failures are logged and counted instead of raised.

        Returns:
            ReconcileResult, or None if the snapshot failed.
        """
        try:
            result = self.reconcile(snapshot, now=now)
        except Exception as e:
            logger.exception("Failed to reconcile %s", snapshot.source_url)
            tally.record_failure(snapshot.source_url, e)
            return None

        tally.record(result)
        return result

    def reconcile_batch(
        self, snapshots: Iterable[ListingSnapshot], now: datetime | None = None
    ) -> ReconcileTally:
        """Reconcile snapshots sequentially with per-snapshot error isolation.

        Args:
            snapshots: Validated snapshots, already de-duplicated by URL.
            now: Observation time recorded on each listing.

        Returns:
            ReconcileTally for the batch.
        """
        tally = ReconcileTally()
        for snapshot in snapshots:
            self.reconcile_into(tally, snapshot, now=now)
        return tally
