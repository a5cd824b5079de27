# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Version Reconciler

Single responsibility: check that every version range imposed on a module
admits the module's registered version.

The registry holds exactly one version per module, so a conflict cannot be
solved by searching other versions; it is reported for manual resolution
(e.g. register a newer version first).
"""

import logging
from functools import reduce
from typing import Dict, List, Mapping, Optional

from module_resolver.core.errors import VersionConflictError
from module_resolver.models.module_models import (
    MANUAL_RESOLUTION_REQUIRED,
    ConflictResolution,
    DependencyConflict,
    DependencyGraph,
    VersionConstraint,
)
from module_resolver.models.version_range import VersionRange, parse_version

logger = logging.getLogger(__name__)


class VersionReconciler:
    """Validates version constraints across a dependency closure"""

    def find_conflicts(
        self,
        graph: DependencyGraph,
        versions: Optional[Mapping[str, str]] = None
    ) -> List[DependencyConflict]:
        """
        Find every module whose version lies outside its imposed ranges.

        Args:
            graph: Dependency graph with constraints_by_module
            versions: Version to check per module (defaults to the
                registered version recorded on each graph node)

        Returns:
            Conflicts in ascending module name order (empty if consistent)
        """
        conflicts = []

        for name in sorted(graph.constraints_by_module):
            constraints = graph.constraints_by_module[name]
            if versions is not None:
                if name not in versions:
                    continue
                declared = versions[name]
            else:
                declared = graph.nodes[name].version

            conflict = self.check_module(name, declared, constraints)
            if conflict:
                conflicts.append(conflict)

        return conflicts

    def check_module(
        self,
        name: str,
        declared_version: str,
        constraints: List[VersionConstraint]
    ) -> Optional[DependencyConflict]:
        """
        Check one module's version against the intersection of its ranges.

        Returns:
            A conflict naming the violated constraints, or None
        """
        if not constraints:
            return None

        version = parse_version(declared_version)
        ranges = [VersionRange.parse(c.version_range) for c in constraints]
        intersection = reduce(lambda a, b: a & b, ranges)

        if intersection.contains(version):
            return None

        violated = [c for c, r in zip(constraints, ranges) if not r.contains(version)]
        logger.debug(
            f"Version conflict on {name}@{declared_version}: "
            f"{[c.to_dict() for c in violated]}"
        )
        return DependencyConflict(
            module_name=name,
            declared_version=declared_version,
            conflicting_ranges=violated,
            constraints=list(constraints),
            resolution=MANUAL_RESOLUTION_REQUIRED
        )

    def reconcile(self, graph: DependencyGraph) -> Dict[str, str]:
        """
        Confirm the graph is version-consistent.

        Returns:
            Resolved version per module (the registered version)

        Raises:
            VersionConflictError: For the first conflicting module; every
                conflict found is listed under details["conflicts"]
        """
        conflicts = self.find_conflicts(graph)
        if conflicts:
            first = conflicts[0]
            raise VersionConflictError(
                first.module_name,
                first.declared_version,
                [c.to_dict() for c in first.conflicting_ranges],
                details={
                    "constraints": [c.to_dict() for c in first.constraints],
                    "conflicts": [c.model_dump() for c in conflicts],
                    "resolution": MANUAL_RESOLUTION_REQUIRED,
                }
            )

        return {name: node.version for name, node in graph.nodes.items()}


def suggest_resolutions(conflicts: List[DependencyConflict]) -> List[ConflictResolution]:
    """
    Suggest an action per conflict.

    When the combined ranges admit some version above the registered one,
    the suggestion is to register that version first; otherwise the ranges
    are mutually exclusive and the dependents themselves must change.
    """
    resolutions = []

    for conflict in conflicts:
        ranges = [VersionRange.parse(c.version_range) for c in conflict.constraints]
        intersection = reduce(lambda a, b: a & b, ranges)
        bound = intersection.lower_bound()
        declared = parse_version(conflict.declared_version)

        if bound is not None and bound > declared and intersection.contains(bound):
            resolutions.append(ConflictResolution(
                module_name=conflict.module_name,
                action="upgrade",
                version=str(bound)
            ))
        else:
            resolutions.append(ConflictResolution(
                module_name=conflict.module_name,
                action=MANUAL_RESOLUTION_REQUIRED,
                error="No compatible version found"
            ))

    return resolutions
