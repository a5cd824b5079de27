# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Dependency Graph Builder

Single responsibility: expand a root module into its transitive closure
"""

import logging
from collections import deque
from typing import Dict, List, Set, Tuple

from module_resolver.core.errors import MissingModuleError
from module_resolver.models.module_models import (
    DependencyGraph,
    DependencyNode,
    VersionConstraint,
)

from .catalog import ModuleRegistry

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Builds the dependency graph of a root module (iterative, breadth-first)"""

    def __init__(self, registry: ModuleRegistry):
        """
        Initialize graph builder.

        Args:
            registry: Registry to read descriptors from (never mutated)
        """
        self.registry = registry

    def build(self, root: str, strict: bool = True) -> DependencyGraph:
        """
        Build the dependency graph covering root and its full closure.

        A module reached more than once is expanded only the first time;
        later encounters add their version constraint and a new edge, never
        a second copy of the module's own edges.

        Args:
            root: Name of the module requested for installation
            strict: Fail on the first missing required dependency. When
                False, missing dependencies are listed in graph.missing and
                left out of the graph (used by pre-flight checks).

        Returns:
            Dependency graph (edges point dependency -> dependent)

        Raises:
            MissingModuleError: If root, or (in strict mode) any required
                dependency, is not registered
        """
        root_descriptor = self.registry.lookup(root)
        if root_descriptor is None:
            raise MissingModuleError(root)

        nodes: Dict[str, DependencyNode] = {
            root: DependencyNode(name=root, version=root_descriptor.version, depth=0, discovery_index=0)
        }
        edges: List[Tuple[str, str]] = []
        edge_set: Set[Tuple[str, str]] = set()
        constraints: Dict[str, List[VersionConstraint]] = {}
        missing: List[str] = []

        queue = deque([root_descriptor])

        while queue:
            descriptor = queue.popleft()
            node = nodes[descriptor.name]

            for dep in descriptor.dependencies:
                dep_descriptor = self.registry.lookup(dep.name)
                if dep_descriptor is None:
                    if dep.optional:
                        logger.info(
                            f"Skipping optional dependency {dep.name} of {descriptor.name}: not registered"
                        )
                        continue
                    if strict:
                        raise MissingModuleError(dep.name, required_by=descriptor.name)
                    if dep.name not in missing:
                        missing.append(dep.name)
                    continue

                constraints.setdefault(dep.name, []).append(
                    VersionConstraint(required_by=descriptor.name, version_range=dep.version_range)
                )

                edge = (dep.name, descriptor.name)
                if edge not in edge_set:
                    edge_set.add(edge)
                    edges.append(edge)
                    node.dependencies.append(dep.name)

                if dep.name not in nodes:
                    nodes[dep.name] = DependencyNode(
                        name=dep.name,
                        version=dep_descriptor.version,
                        depth=node.depth + 1,
                        discovery_index=len(nodes)
                    )
                    queue.append(dep_descriptor)

                dep_node = nodes[dep.name]
                if descriptor.name not in dep_node.required_by:
                    dep_node.required_by.append(descriptor.name)

        logger.debug(f"Built dependency graph for {root}: {len(nodes)} modules, {len(edges)} edges")

        return DependencyGraph(
            root=root,
            nodes=nodes,
            edges=edges,
            constraints_by_module=constraints,
            missing=missing
        )
