"""
Configuration management for the audit service.

Loads settings from environment variables and an optional .env file.
"""

from backend_solaudit.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
