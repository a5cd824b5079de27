# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Core utilities and shared modules for the module resolver.

This package contains:
- config: Configuration management
- errors: Custom exceptions
- logging: Structured logging
"""

from module_resolver.core.config import get_config, Config
from module_resolver.core.errors import ModuleResolverError, ResolutionError, ValidationError
from module_resolver.core.logging import get_logger

__all__ = [
    "get_config",
    "Config",
    "ModuleResolverError",
    "ResolutionError",
    "ValidationError",
    "get_logger",
]
