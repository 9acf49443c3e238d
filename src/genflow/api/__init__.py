"""HTTP API of the generation core."""

from .errors import ApiError, api_error_handler
from .routes import tasks_router, uploads_router

__all__ = ["ApiError", "api_error_handler", "tasks_router", "uploads_router"]
