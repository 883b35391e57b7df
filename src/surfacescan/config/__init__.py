"""
Configuration management for SurfaceScan.

Supports multiple configuration sources in order of priority:
1. Environment variables (highest priority)
2. Global config file (~/.surfacescan/config.yml)
3. Default values (lowest priority)
"""

from .env_loader import get_global_config_dir, get_global_config_path, load_global_config
from .getters import (
    get_config,
    get_history_db_path,
    get_history_limit,
    get_scan_config,
    get_scan_timeout,
    get_user_agent,
    get_verbose,
    get_verify_ssl,
)

__all__ = [
    # env_loader
    "get_global_config_dir",
    "get_global_config_path",
    "load_global_config",
    # getters
    "get_config",
    "get_history_db_path",
    "get_history_limit",
    "get_scan_config",
    "get_scan_timeout",
    "get_user_agent",
    "get_verbose",
    "get_verify_ssl",
]
