"""API routes module."""

from .routes_verify import router as verify_router

__all__ = ["verify_router"]
