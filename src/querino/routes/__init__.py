"""HTTP routes."""

from querino.routes.documents import router as documents_router
from querino.routes.versions import router as versions_router

__all__ = ["documents_router", "versions_router"]
