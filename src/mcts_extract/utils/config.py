"""YAML configuration files."""

from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..errors import ConfigError


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a YAML mapping from path.

    An optional top-level ``extractor:`` section is unwrapped, so one file
    can hold settings for several tools.
    """
    with open(path, 'r') as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    if "extractor" in data and isinstance(data["extractor"], dict):
        return dict(data["extractor"])
    return data


def save_config(config: Dict[str, Any], path: Union[str, Path]) -> None:
    with open(path, 'w') as f:
        yaml.safe_dump({"extractor": config}, f, sort_keys=False)
