"""Configuration module -- exports Settings, load_config and resolve_author."""

from speechindex.config.loader import load_config, resolve_author
from speechindex.config.settings import Settings

__all__ = ["Settings", "load_config", "resolve_author"]
