"""Snapshot extractors feeding reconciliation passes."""

from housewipe.scrapers.base import BaseExtractor, parse_snapshot
from housewipe.scrapers.payload import JsonFileExtractor, PayloadExtractor

__all__ = ["BaseExtractor", "JsonFileExtractor", "PayloadExtractor", "parse_snapshot"]
