"""
config.py - Configuration loader for the histogram clustering toolkit.

Loads settings from config.yaml with sensible defaults so that image
geometry, histogram layout and training parameters are never hard-coded
inside a module.
"""

import os
import yaml
from typing import Any, Optional

# Resolve the config file relative to the repo root, not the CWD,
# so imports work regardless of where the script is launched from.
_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_CONFIG_PATH = os.path.join(_REPO_ROOT, "config.yaml")

_DEFAULTS: dict[str, Any] = {
    "image": {
        "width": 128,
        "height": 128,
        "max_value": 255,
        "class_index": 5,
    },
    "histogram": {
        "bin_count": 64,
        "interval_size": 4,
    },
    "perceptron": {
        "epochs": 100,
    },
    "clustering": {
        "default_measure": "perceptron",
        "min_images": 2,
    },
    "logging": {
        "level": "WARNING",
        "format": "%(levelname)-8s %(message)s",
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base*, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Optional[str] = _CONFIG_PATH) -> dict[str, Any]:
    """
    Load the YAML configuration file and merge it with built-in defaults.

    Parameters
    ----------
    config_path : str, optional
        Path to config.yaml. Defaults to the repo-root config.yaml.
        A missing file (or None) yields the defaults unchanged.

    Returns
    -------
    dict
        Merged configuration dictionary.
    """
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
    else:
        user_config = {}

    return _deep_merge(_DEFAULTS, user_config)


# Module-level singleton so callers can just do `from src.config import CONFIG`
CONFIG = load_config()
