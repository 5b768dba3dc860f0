"""Extractors for listings already scraped by an external collector."""

import json
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from housewipe.scrapers.base import BaseExtractor


class PayloadExtractor(BaseExtractor):
    """Yield records from an in-memory payload (e.g. an HTTP request body)."""

    name = "payload"

    def __init__(self, records: list[dict[str, Any]]) -> None:
        self._records = list(records)

    async def iter_raw(self) -> AsyncIterator[dict[str, Any]]:
        for record in self._records:
            yield record


class JsonFileExtractor(BaseExtractor):
    """Yield records from a JSON file.

    The file holds either a list of listing objects or an object with a
    ``listings`` list, matching the body the userscript posts.
    """

    name = "json-file"

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    def load(self) -> list[dict[str, Any]]:
        """Read and unwrap the payload file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the JSON is not a list or a ``listings`` object.
        """
        with open(self._path, encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get("listings")
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of listings in {self._path}")
        return data

    async def iter_raw(self) -> AsyncIterator[dict[str, Any]]:
        for record in self.load():
            yield record
