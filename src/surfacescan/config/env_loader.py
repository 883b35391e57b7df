"""Global configuration file loading."""

from pathlib import Path
from typing import Any

import yaml


def get_global_config_dir() -> Path:
    """Return the ~/.surfacescan directory."""
    return Path.home() / ".surfacescan"


def get_global_config_path() -> Path:
    return get_global_config_dir() / "config.yml"


def load_global_config() -> dict[str, Any]:
    """Load global configuration from ~/.surfacescan/config.yml."""
    config_path = get_global_config_path()
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        # A file holding a bare scalar or list is treated as empty.
        return data if isinstance(data, dict) else {}
    return {}
