# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Module resolver configuration - single source of truth.
YAML is king. Env vars only for deployment overrides.

Example (configs/resolver.yaml):

    catalog:
      path: configs/modules.yaml
    resolution:
      tie_break: name
    installation:
      parallel: false
      max_workers: 4
      step_timeout: 300
      lock_timeout: 30
      transaction_log: logs/installations.jsonl
    logging:
      level: INFO
      format: json
"""

import os
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from module_resolver.core.errors import ConfigurationError

TIE_BREAK_MODES = ("name", "declaration")
LOG_FORMATS = ("json", "text")


# =============================================================================
# CONFIGURATION DATACLASS
# =============================================================================

@dataclass(frozen=True)
class Config:
    """
    Immutable resolver configuration.
    All values from YAML. No hidden state.
    """

    # -- Catalog --
    catalog_path: Optional[str] = None

    # -- Resolution --
    tie_break: str = "name"

    # -- Installation --
    parallel_install: bool = False
    max_workers: int = 4
    step_timeout: Optional[float] = None
    lock_timeout: Optional[float] = 30.0
    transaction_log_path: Optional[str] = None

    # -- Logging --
    log_level: str = "INFO"
    log_format: str = "json"

    def __post_init__(self):
        if self.tie_break not in TIE_BREAK_MODES:
            raise ConfigurationError(
                f"Invalid tie_break '{self.tie_break}', expected one of {TIE_BREAK_MODES}"
            )
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"Invalid log format '{self.log_format}', expected one of {LOG_FORMATS}"
            )
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.step_timeout is not None and self.step_timeout <= 0:
            raise ConfigurationError(f"step_timeout must be positive, got {self.step_timeout}")


# =============================================================================
# LOADER
# =============================================================================

def load_config(path: str = "configs/resolver.yaml") -> Config:
    """
    Load configuration from YAML.
    Returns defaults if file doesn't exist.
    """
    if not Path(path).exists():
        return Config(log_level=os.getenv("LOG_LEVEL", "INFO"))

    try:
        with open(path) as f:
            y = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", config_file=path) from e

    if not isinstance(y, dict):
        raise ConfigurationError(f"Config root must be a mapping: {path}", config_file=path)

    # Helper to safely navigate nested dicts
    def get(d: dict, *keys, default=None):
        for k in keys:
            if not isinstance(d, dict):
                return default
            d = d.get(k, {})
        return d if d != {} else default

    try:
        return Config(
            # Catalog
            catalog_path=get(y, "catalog", "path"),

            # Resolution
            tie_break=get(y, "resolution", "tie_break") or "name",

            # Installation
            parallel_install=bool(get(y, "installation", "parallel", default=False)),
            max_workers=int(get(y, "installation", "max_workers") or 4),
            step_timeout=get(y, "installation", "step_timeout"),
            lock_timeout=get(y, "installation", "lock_timeout", default=30.0),
            transaction_log_path=get(y, "installation", "transaction_log"),

            # Logging
            log_level=os.getenv("LOG_LEVEL") or get(y, "logging", "level") or "INFO",
            log_format=get(y, "logging", "format") or "json",
        )
    except ConfigurationError as e:
        e.config_file = path
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value in {path}: {e}", config_file=path) from e


# =============================================================================
# GLOBAL INSTANCE
# =============================================================================

_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global config instance."""
    global _config
    if _config is None:
        config_path = os.getenv("MODULE_RESOLVER_CONFIG_PATH", "configs/resolver.yaml")
        _config = load_config(config_path)
    return _config


def reload_config() -> Config:
    """Force reload configuration."""
    global _config
    _config = None
    return get_config()
