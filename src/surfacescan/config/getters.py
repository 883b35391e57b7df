"""Configuration getter functions."""

import logging
import os
from pathlib import Path
from typing import Any

from surfacescan.modules.scanner.models import ScanConfig

from .env_loader import get_global_config_dir, load_global_config

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def get_config(key: str, default: Any = None) -> Any:
    """
    Get configuration value with priority:
    1. Environment variable
    2. Global config file
    3. Default value

    Args:
        key: Configuration key
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    # 1. Check environment variable
    env_value = os.environ.get(key)
    if env_value:
        return env_value

    # 2. Check global config
    global_config = load_global_config()
    if key in global_config and global_config[key] is not None:
        return global_config[key]

    # 3. Return default
    return default


def _as_float(key: str, default: float) -> float:
    value = get_config(key, default)
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s=%r, using %s", key, value, default)
        return default
    if number <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %s", key, value, default)
        return default
    return number


def _as_int(key: str, default: int) -> int:
    value = get_config(key, default)
    try:
        number = int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s=%r, using %s", key, value, default)
        return default
    return number if number > 0 else default


def _as_bool(key: str, default: bool) -> bool:
    value = get_config(key, default)
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    logger.warning("Ignoring invalid %s=%r, using %s", key, value, default)
    return default


def get_scan_timeout() -> float:
    """Global scan deadline in seconds (default: 25)."""
    return _as_float("SURFACESCAN_SCAN_TIMEOUT", ScanConfig.scan_timeout)


def get_verify_ssl() -> bool:
    """Whether TLS certificates are verified (default: true)."""
    return _as_bool("SURFACESCAN_VERIFY_SSL", True)


def get_user_agent() -> str:
    """User-Agent sent with every probe request."""
    return str(get_config("SURFACESCAN_USER_AGENT", ScanConfig.user_agent))


def get_history_db_path() -> Path:
    """Location of the local scan history database."""
    value = get_config("SURFACESCAN_HISTORY_DB")
    if value:
        return Path(str(value)).expanduser()
    return get_global_config_dir() / "history.db"


def get_history_limit() -> int:
    """Number of scans kept in history (default: 10)."""
    return _as_int("SURFACESCAN_HISTORY_LIMIT", 10)


def get_verbose() -> bool:
    return _as_bool("SURFACESCAN_VERBOSE", False)


def get_scan_config(scan_timeout: float | None = None) -> ScanConfig:
    """Build a :class:`ScanConfig` from the configuration sources.

    An explicit *scan_timeout* (e.g. from the command line) wins over config.
    """
    return ScanConfig(
        scan_timeout=scan_timeout if scan_timeout is not None else get_scan_timeout(),
        verify_ssl=get_verify_ssl(),
        user_agent=get_user_agent(),
    )
