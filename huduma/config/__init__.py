"""
Configuration.
Exports the application settings.
"""

from huduma.config.loader import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
