"""ASGI entry point: ``uvicorn src.genflow.main:build_app --factory``."""

from fastapi import FastAPI

from .core.app import create_app
from .core.config import AppConfig
from .logging import configure_logging


def build_app(config: AppConfig | None = None) -> FastAPI:
    """Configure logging and build the FastAPI application."""
    cfg = config or AppConfig.build_default()
    configure_logging(cfg.log_level)
    return create_app(cfg)
