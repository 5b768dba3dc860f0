"""FastAPI application for HouseWipe."""
