from __future__ import annotations

"""
Configuration Domain Management.

Handles the dict-based pack configuration: defaults, and persistence of
user preferences as JSON in the user data directory. Missing or corrupt
files fall back to defaults.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from embedres.domain.constants import (
    CURRENT_CONFIG_VERSION,
    DEFAULT_CHUNK_WIDTH,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_VAR_NAME,
    SHAPE_DEPENDENT,
    STDOUT_TARGET,
)
from embedres.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"

# -----------------------------------------------------------------------------
# Configuration Models (Dict-based)
# -----------------------------------------------------------------------------

def get_default_config() -> Dict[str, Any]:
    """
    Generate the default pack configuration.
    This dictionary drives the behavior of the pipeline.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # IO
        "source": os.getcwd(),
        "output": STDOUT_TARGET,

        # Emission
        "var_name": DEFAULT_VAR_NAME,
        "shape": SHAPE_DEPENDENT,
        "chunk_width": DEFAULT_CHUNK_WIDTH,

        # Walking & Filtering
        "max_depth": DEFAULT_MAX_DEPTH,
        "include_patterns": [],
        "exclude_patterns": list(DEFAULT_EXCLUDE_PATTERNS),
        "respect_gitignore": False,
    }


def get_config_file() -> str:
    """Absolute path of the persisted configuration file."""
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the persisted configuration merged over the defaults.

    Unknown keys are dropped; a missing, unreadable or malformed file
    yields the defaults.

    Args:
        path: Override for the configuration file location.

    Returns:
        Dict[str, Any]: The effective configuration.
    """
    config = get_default_config()
    config_file = path or get_config_file()

    if not os.path.exists(config_file):
        logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    settings = data.get("settings", {})
    if not isinstance(settings, dict):
        logger.warning("Config 'settings' is not an object. Using defaults.")
        return config

    for key, value in settings.items():
        if key in config:
            config[key] = value
        else:
            logger.debug(f"Ignoring unknown config key '{key}'")
    return config


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> bool:
    """
    Persist the configuration to disk.

    Only keys known to the defaults are stored.

    Args:
        config: The configuration dictionary to save.
        path: Override for the configuration file location.

    Returns:
        bool: True if the file was written.
    """
    config_file = path or get_config_file()
    defaults = get_default_config()
    state = {
        "version": CURRENT_CONFIG_VERSION,
        "settings": {k: config[k] for k in defaults if k in config},
    }

    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_file)), exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {config_file}")
        return True
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False
