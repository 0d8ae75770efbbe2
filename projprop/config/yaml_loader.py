"""YAML access for the packaged defaults and user configuration files.

This module has no dependencies on other config modules to avoid circular
imports.
"""

from __future__ import annotations

import copy
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def _read_mapping(path: Path) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping at top level")
    return data


@lru_cache(maxsize=1)
def _packaged_defaults() -> dict[str, Any]:
    return _read_mapping(DEFAULTS_PATH)


def get_defaults() -> dict[str, Any]:
    """Default configuration as nested dictionaries, in the layout of a user file.

    Example:
        >>> get_defaults()['propagation']['charge_per_step']
        10
    """
    return copy.deepcopy(_packaged_defaults())


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load a user configuration file.

    The file uses the same layout as defaults.yaml; missing sections fall
    back to the defaults when passed to ``SimulationConfig.from_dict``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the top level of the file is not a mapping.
    """
    return _read_mapping(Path(path))
