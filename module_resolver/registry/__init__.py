# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry Module - Dependency Resolution

Modular resolution pipeline:
- catalog: look up module descriptors
- graph: expand the transitive dependency closure
- versions: reconcile version ranges
- ordering: topological installation order and cycle detection
"""

from .catalog import (
    InMemoryModuleRegistry,
    ModuleCatalogLoader,
    ModuleRegistry,
    snapshot_registry,
)
from .graph import GraphBuilder
from .versions import VersionReconciler, suggest_resolutions
from .ordering import TopologicalSorter, find_cycle

__all__ = [
    "InMemoryModuleRegistry",
    "ModuleCatalogLoader",
    "ModuleRegistry",
    "snapshot_registry",
    "GraphBuilder",
    "VersionReconciler",
    "suggest_resolutions",
    "TopologicalSorter",
    "find_cycle",
]
