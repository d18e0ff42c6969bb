"""Core configuration for the Forge API."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
