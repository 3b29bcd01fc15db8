"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

    1. config/config.yaml  -- tuning defaults checked into the repo
    2. .env file           -- local developer overrides
    3. environment vars    -- deploy-time values

``load_config`` reads the YAML file, then deep-merges the env-derived values
from :class:`Settings` on top of it.
"""

from pathlib import Path

import yaml

from shadowsync.config.settings import Settings

# Tuning knobs used when config.yaml is absent or leaves a key out.
DEFAULT_CONFIG: dict = {
    "pipeline": {
        "capture_preview_chars": 30,
        "normalize_delay": 0.4,
        "sync_delay": 0.8,
    },
    "event_log": {
        "max_events": 50,
    },
    "health": {
        "tick_interval": 0.8,
    },
    "boot": {
        "mesh_delay": 1.2,
    },
    "agent": {
        "cache_ttl": 300,
        "cache_size": 256,
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to take env overrides from.  A fresh
            ``Settings()`` is read when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config: dict = {}
    _deep_merge(config, DEFAULT_CONFIG)

    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(config, env_overrides)
    return config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        elif isinstance(value, dict):
            base[key] = {}
            _deep_merge(base[key], value)
        else:
            base[key] = value
