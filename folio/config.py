"""Configuration loading for Folio.

Key functions:
- load_config: Load ``folio.yaml`` from a project root, with defaults applied.
- load_config_file: Load an explicit configuration file, with defaults applied.
- merge_config: Overlay configuration values on the defaults.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "folio.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "output_dir": "output",
    "layouts_dir": "layouts",
    "lib_dir": "lib",
    "page_defaults": {"filename": "index", "extension": "html"},
    "strict_layout_formats": False,
}


def merge_config(overrides: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the default configuration with ``overrides`` applied.

    ``page_defaults`` is merged key by key; every other key is replaced.

    Args:
        overrides: Values taking precedence over the defaults.

    Returns:
        A new configuration dictionary.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if not overrides:
        return config
    for key, value in overrides.items():
        if key == "page_defaults" and isinstance(value, Mapping):
            config["page_defaults"].update(value)
        else:
            config[key] = value
    return config


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration from a YAML file.

    A missing file or a file that does not hold a mapping yields the
    defaults.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    loaded: Any = {}
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        loaded = {}
    return merge_config(loaded)


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from folio.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    return load_config_file(project_root / CONFIG_FILENAME)
