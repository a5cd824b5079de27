# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Data models for the module resolver.
"""

from module_resolver.models.version_range import VersionRange, parse_version
from module_resolver.models.module_models import (
    MANUAL_RESOLUTION_REQUIRED,
    ConflictResolution,
    DependencyConflict,
    DependencyGraph,
    DependencyNode,
    DependencySpec,
    InstallabilityReport,
    InstallationReport,
    InstallationStatus,
    ModuleDescriptor,
    ModuleState,
    ResolutionResult,
    StepFailure,
    TieBreak,
    VersionConstraint,
)

__all__ = [
    "MANUAL_RESOLUTION_REQUIRED",
    "ConflictResolution",
    "DependencyConflict",
    "DependencyGraph",
    "DependencyNode",
    "DependencySpec",
    "InstallabilityReport",
    "InstallationReport",
    "InstallationStatus",
    "ModuleDescriptor",
    "ModuleState",
    "ResolutionResult",
    "StepFailure",
    "TieBreak",
    "VersionConstraint",
    "VersionRange",
    "parse_version",
]
