"""
Helper utilities for the overlay.

Provides:
- Settings loading (TOML merged over defaults)
- Catalog file location
- Launching a catalog entry's target
"""

import subprocess
from pathlib import Path
from typing import Any, Dict, Optional

import toml
from loguru import logger

DATA_DIR = Path(__file__).parent.parent / "data"

DEFAULT_SETTINGS = {
    "overlay": {
        "hide_delay_ms": 200,
        "match_mode": "prefix",
        "empty_query": "all",
        "max_results": 7,
        "local_max_results": 0,
    },
    "panel": {
        "width": 600,
        "height": 420,
        "icon_size": 32,
    },
    "catalog": {
        "path": "",
    },
}


def load_settings(settings_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load overlay settings from a TOML file.

    Args:
        settings_path: Settings file (defaults to data/settings.toml)

    Returns:
        Dictionary containing settings with defaults applied

    Example settings.toml:
        [overlay]
        hide_delay_ms = 250
        match_mode = "substring"
    """
    if settings_path is None:
        settings_path = DATA_DIR / "settings.toml"
    settings_path = Path(settings_path)

    if not settings_path.exists():
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        return _deep_merge(DEFAULT_SETTINGS, {})

    try:
        loaded = toml.load(settings_path)
    except Exception as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}, using defaults")
        return _deep_merge(DEFAULT_SETTINGS, {})

    return _deep_merge(DEFAULT_SETTINGS, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence); neither input is mutated
    """
    result = {}
    for key, value in base.items():
        result[key] = _deep_merge(value, {}) if isinstance(value, dict) else value

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def catalog_path(settings: Dict[str, Any]) -> Path:
    """Catalog file from settings, falling back to data/catalog.toml."""
    configured = settings.get("catalog", {}).get("path")
    return Path(configured).expanduser() if configured else DATA_DIR / "catalog.toml"


def launch_target(entry) -> bool:
    """
    Spawn an entry's target command, detached from the overlay.

    Returns:
        True if the process was started
    """
    if not entry.target:
        logger.warning(f"'{entry.name}' has no target to launch")
        return False

    try:
        subprocess.Popen(
            list(entry.target),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError:
        logger.exception(f"Failed to launch {entry.target[0]}")
        return False

    logger.debug(f"Launched {entry.name}: {' '.join(entry.target)}")
    return True
