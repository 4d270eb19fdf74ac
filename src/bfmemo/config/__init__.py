"""Configuration for bfmemo."""

from bfmemo.config.loader import build_config, env_overrides, load_config, load_yaml
from bfmemo.config.schemas import MemoConfig

__all__ = [
    "MemoConfig",
    "load_config",
    "load_yaml",
    "env_overrides",
    "build_config",
]
