"""HouseWipe: real-estate listing reconciliation, price tracking and swipe feed."""

__version__ = "0.1.0"
