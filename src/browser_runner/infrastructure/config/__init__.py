"""
Configuration Infrastructure

Environment-driven settings.
"""

from .config import Settings, settings, get_settings, DEFAULT_DEV_SERVER_PORTS

__all__ = ["Settings", "settings", "get_settings", "DEFAULT_DEV_SERVER_PORTS"]
