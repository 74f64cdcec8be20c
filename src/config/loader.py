"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. Built-in defaults  : _DEFAULTS below, so a missing YAML file
#                            still yields a complete config
#   2. config/config.yaml : Static tuning checked into the repo
#   3. Environment vars   : Read through Settings at deploy time
#
# _deep_merge does recursive dict merging:
#   base = {"recommendations": {"count": 6}}
#   overrides = {"recommendations": {"temperature": 0.9}}
#   result = {"recommendations": {"count": 6, "temperature": 0.9}}
# ──────────────────────────────────────────────────────────────────────
"""

import copy
from pathlib import Path

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError

_DEFAULTS: dict = {
    "recommendations": {
        "count": 6,
        "temperature": 0.8,
        "max_tokens": 1500,
        "enrichment_timeout": 2.0,
    },
    "chat": {
        "max_message_length": 500,
        "temperature": 0.8,
        "max_tokens": 1500,
    },
    "explain": {
        "temperature": 0.7,
        "max_tokens": 200,
    },
    "catalog": {
        "browse_page_size": 40,
        "top_list_size": 50,
        "genres_page_size": 40,
        "request_timeout": 10.0,
    },
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge; a fresh one is built when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML file is malformed or its top level
            is not a mapping.
    """
    config = copy.deepcopy(_DEFAULTS)

    config_path = Path(path)
    if config_path.exists():
        try:
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Malformed YAML in {config_path}: {exc}") from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping at the top level")
        _deep_merge(config, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "llm": {
            "available_providers": settings.get_available_llm_providers(),
        },
        "catalog": {
            "base_url": settings.rawg_base_url,
            "configured": bool(settings.rawg_api_key),
        },
        "storage": {
            "database_path": settings.database_path,
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
        else:
            base[key] = value
