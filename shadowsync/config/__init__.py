"""Configuration module -- exports Settings and load_config."""

from shadowsync.config.loader import load_config
from shadowsync.config.settings import Settings

__all__ = ["Settings", "load_config"]
