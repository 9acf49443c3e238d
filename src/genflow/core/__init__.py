"""Core configuration and application factory."""

from .config import AppConfig

__all__ = ["AppConfig"]
