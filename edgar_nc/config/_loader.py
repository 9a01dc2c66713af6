"""
YAML defaults for the parser settings.

The files live in the repository's ``configs/`` directory. Set
``NC_CONFIG_DIR`` to read them from elsewhere, e.g. when the package is
installed without the repository checkout.

Each file is read once per directory; call clear_config_cache() after
editing a file or changing ``NC_CONFIG_DIR`` inside one process.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_DIR_ENV = "NC_CONFIG_DIR"


def configs_dir() -> Path:
    """Directory holding config.yaml and grammar.yaml."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(__file__).parent.parent.parent / "configs"


def load_yaml_section(config_file: str, section: Optional[str] = None) -> Dict[str, Any]:
    """
    Top-level mapping of *config_file*, or one section of it.

    A missing file or section yields ``{}`` so every setting falls back to
    its coded default.

    Raises:
        ValueError: The file or the section is not a YAML mapping
    """
    data = _read_yaml(configs_dir() / config_file)
    if section is None:
        return data
    value = data.get(section) or {}
    if not isinstance(value, dict):
        raise ValueError(f"{config_file}: section '{section}' must be a mapping")
    return value


@lru_cache(maxsize=16)
def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name}: top level must be a mapping")
    return data


def clear_config_cache() -> None:
    """Forget every file read so far."""
    _read_yaml.cache_clear()
