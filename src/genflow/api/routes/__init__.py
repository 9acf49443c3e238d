"""API routers."""

from .tasks import router as tasks_router
from .uploads import router as uploads_router

__all__ = ["tasks_router", "uploads_router"]
