"""Configuration management for clisession.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides with the ``CLISESSION_`` prefix.
"""

from clisession.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
