"""API Routes for SchemaProxy."""

from .documents_router import router as documents_router
from .resources_router import router as resources_router

__all__ = [
    "documents_router",
    "resources_router",
]
