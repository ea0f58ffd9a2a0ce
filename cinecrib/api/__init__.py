"""API routes."""

from cinecrib.api.router import api_router

__all__ = ["api_router"]
