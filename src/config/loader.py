"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
#   1. config/config.yaml -- static defaults checked into the repo
#   2. .env file          -- local developer overrides (not committed)
#   3. Environment vars   -- set at deploy time
#
# load_config() reads the YAML file, then deep-merges the values coming
# from Settings (which already applied layers 2 and 3) on top of it.
# Secrets are reduced to "is configured" booleans so the merged dict can
# be logged safely.
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from src.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge environment-based Settings on top.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge.  A fresh one is built when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "ticketmaster": {
            "configured": settings.ticketmaster_configured(),
            "base_url": settings.ticketmaster_base_url,
            "timeout": settings.ticketmaster_timeout,
        },
        "spotify": {
            "configured": settings.spotify_configured(),
            "redirect_uri": settings.spotify_redirect_uri,
        },
        "concerts": {
            "max_concurrency": settings.concert_search_concurrency,
        },
        "database": {
            "path": settings.database_path,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
