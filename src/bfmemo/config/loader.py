"""Configuration loading for bfmemo.

A config file is YAML, either flat or with the settings under a ``memo:``
key::

    memo:
      directory: ~/.cache/bfmemo
      minimum_elapsed_ms: 250

Environment variables override file values:
``BFMEMO_DIR``, ``BFMEMO_IN_PLACE`` and ``BFMEMO_MIN_ELAPSED_MS``.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import ValidationError

from bfmemo.config.schemas import MemoConfig
from bfmemo.core.constants import CACHE_DIR_ENV, IN_PLACE_ENV, MIN_ELAPSED_ENV
from bfmemo.core.exceptions import ConfigError
from bfmemo.core.logging import get_logger

logger = get_logger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML config file into a dict.

    Raises:
        ConfigError: If the file is missing, invalid YAML, or not a mapping
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError("Config file not found", details={"path": path})

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError("Invalid YAML in config file", details={"path": path}, cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping", details={"path": path})

    section = data.get("memo", data)
    if not isinstance(section, dict):
        raise ConfigError("'memo' section must be a mapping", details={"path": path})
    return dict(section)


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect config values set through environment variables."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}

    if CACHE_DIR_ENV in environ:
        overrides["directory"] = environ[CACHE_DIR_ENV] or None

    if IN_PLACE_ENV in environ:
        raw = environ[IN_PLACE_ENV].strip().lower()
        if raw in _TRUE_VALUES:
            overrides["in_place"] = True
        elif raw in _FALSE_VALUES:
            overrides["in_place"] = False
        else:
            raise ConfigError(f"Invalid boolean for {IN_PLACE_ENV}", details={"value": raw})

    if MIN_ELAPSED_ENV in environ:
        raw = environ[MIN_ELAPSED_ENV]
        try:
            overrides["minimum_elapsed_ms"] = float(raw)
        except ValueError as e:
            raise ConfigError(
                f"Invalid number for {MIN_ELAPSED_ENV}", details={"value": raw}, cause=e
            ) from e

    return overrides


def build_config(values: Mapping[str, Any]) -> MemoConfig:
    """Validate a mapping into a MemoConfig, raising ConfigError on failure."""
    try:
        return MemoConfig(**values)
    except ValidationError as e:
        raise ConfigError("Invalid memo configuration", cause=e) from e


def load_config(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> MemoConfig:
    """Load a MemoConfig from an optional YAML file, env vars and overrides.

    Precedence (lowest to highest): file, environment, keyword overrides.
    Keyword overrides whose value is None are ignored.
    """
    values: Dict[str, Any] = load_yaml(path) if path is not None else {}
    values.update(env_overrides(environ))
    values.update({k: v for k, v in overrides.items() if v is not None})

    config = build_config(values)
    logger.debug("Loaded memo config: %s", config)
    return config
