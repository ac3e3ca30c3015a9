"""API routes package."""

from registry.routes.invoke_routes import router as invoke_router

__all__ = ["invoke_router"]
