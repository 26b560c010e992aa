"""Configuration module - exports Settings and a module-level singleton."""

from supportkb.config.settings import Settings

settings = Settings()

__all__ = ["Settings", "settings"]
