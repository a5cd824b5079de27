# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Module Resolver

Resolves a module's transitive dependencies into a safe installation order
and installs them with all-or-nothing rollback.
"""

from module_resolver.core.errors import (
    CyclicDependencyError,
    MissingModuleError,
    ModuleResolverError,
    ResolutionError,
    VersionConflictError,
)
from module_resolver.installer import CallbackInstaller, InstallationEvents, Installer
from module_resolver.models import (
    DependencySpec,
    InstallabilityReport,
    InstallationReport,
    ModuleDescriptor,
    ResolutionResult,
)
from module_resolver.registry import InMemoryModuleRegistry, ModuleCatalogLoader, ModuleRegistry
from module_resolver.service import ModuleInstallationService

__version__ = "0.1.0"

__all__ = [
    "CyclicDependencyError",
    "MissingModuleError",
    "ModuleResolverError",
    "ResolutionError",
    "VersionConflictError",
    "CallbackInstaller",
    "InstallationEvents",
    "Installer",
    "DependencySpec",
    "InstallabilityReport",
    "InstallationReport",
    "ModuleDescriptor",
    "ResolutionResult",
    "InMemoryModuleRegistry",
    "ModuleCatalogLoader",
    "ModuleRegistry",
    "ModuleInstallationService",
]
