"""Base extractor abstract class."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from pydantic import ValidationError

from housewipe.models.pydantic_models import ListingSnapshot

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """Abstract source of raw listing records for one pass.

    Site-specific page parsing, browser automation and session handling live
    behind this boundary. Implementations yield one dict per listing card in
    the order the source presents them, duplicates included.

    Subclasses must implement:
    - name: Short label used in logs
    - iter_raw(): Async iterator over raw listing records
    """

    name: str = "extractor"

    @abstractmethod
    def iter_raw(self) -> AsyncIterator[dict[str, Any]]:
        """Iterate over raw listing records.

        Any exception raised while iterating fails the whole pass.

        Yields:
            Raw listing dicts (camelCase or snake_case keys).
        """
        ...


def parse_snapshot(raw: Any) -> ListingSnapshot | None:
    """Validate a raw record into a ListingSnapshot.

    Args:
        raw: Raw record produced by an extractor.

    Returns:
        ListingSnapshot, or None if the record is malformed.
    """
    if not isinstance(raw, dict):
        logger.warning("Skipping non-object listing record: %r", raw)
        return None

    try:
        return ListingSnapshot.model_validate(raw)
    except ValidationError as e:
        url = raw.get("detailUrl") or raw.get("source_url") or raw.get("url")
        logger.warning(
            "Skipping invalid listing record %s: %d validation error(s)",
            url or "<no url>",
            e.error_count(),
        )
        return None
