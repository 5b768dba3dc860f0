"""Listing enrichment collaborators."""

from housewipe.enrichment.geocoder import GeoapifyGeocoder, Geocoder, clean_address, open_geocoder

__all__ = ["GeoapifyGeocoder", "Geocoder", "clean_address", "open_geocoder"]
