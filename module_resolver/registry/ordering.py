# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Installation Ordering

Topological sort using Kahn's algorithm, in generations.
"""

import logging
from collections import deque
from typing import Callable, Dict, List, Set

from module_resolver.core.errors import CyclicDependencyError
from module_resolver.models.module_models import DependencyGraph, TieBreak

logger = logging.getLogger(__name__)


class TopologicalSorter:
    """
    Orders a dependency graph so every module follows its dependencies.

    Each Kahn round removes all modules with no unresolved dependencies; the
    modules removed together form one generation and have no ordering
    constraint between them. Inside a generation modules are ordered by
    ascending name, or by discovery order from the root when tie_break is
    "declaration".
    """

    def __init__(self, tie_break: TieBreak = TieBreak.NAME):
        self.tie_break = TieBreak(tie_break)

    def _sort_key(self, graph: DependencyGraph) -> Callable[[str], tuple]:
        if self.tie_break == TieBreak.DECLARATION:
            return lambda name: (graph.nodes[name].discovery_index, name)
        return lambda name: (name,)

    def generations(self, graph: DependencyGraph) -> List[List[str]]:
        """
        Split the graph into installation generations.

        Returns:
            Generations, leaves first

        Raises:
            CyclicDependencyError: If the graph contains a cycle (never a partial order)
        """
        key = self._sort_key(graph)

        # Build adjacency list and in-degree count
        dependents: Dict[str, List[str]] = {name: [] for name in graph.nodes}
        in_degree: Dict[str, int] = {name: 0 for name in graph.nodes}
        for dependency, dependent in graph.edges:
            dependents[dependency].append(dependent)
            in_degree[dependent] += 1

        current = sorted((n for n, d in in_degree.items() if d == 0), key=key)
        generations: List[List[str]] = []
        processed = 0

        # Kahn's algorithm
        while current:
            generations.append(current)
            processed += len(current)
            ready = []
            for name in current:
                for dependent in dependents[name]:
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        ready.append(dependent)
            current = sorted(ready, key=key)

        if processed != len(graph.nodes):
            residual = {name for name, degree in in_degree.items() if degree > 0}
            cycle = find_cycle(graph, residual)
            logger.warning(f"Cycle detected while ordering {graph.root}: {' -> '.join(cycle)}")
            raise CyclicDependencyError(cycle)

        return generations

    def sort(self, graph: DependencyGraph) -> List[str]:
        """Flat installation order (generations concatenated)"""
        return [name for generation in self.generations(graph) for name in generation]


def find_cycle(graph: DependencyGraph, residual: Set[str]) -> List[str]:
    """
    Find a shortest cycle among the modules Kahn's algorithm could not order.

    Every residual module still has an unordered dependency, so following
    dependencies from any of them must eventually revisit a module. The
    revisited module lies on a cycle; a breadth-first search from it finds
    the shortest cycle through it.

    Returns:
        Closed cycle in "depends on" direction, starting at its smallest
        member, e.g. ["A", "B", "A"] for A -> B -> A
    """
    depends_on: Dict[str, List[str]] = {name: [] for name in residual}
    for dependency, dependent in graph.edges:
        if dependency in residual and dependent in residual:
            depends_on[dependent].append(dependency)
    for name in depends_on:
        depends_on[name].sort()

    # Walk dependencies until a module repeats
    seen: Set[str] = set()
    node = min(residual)
    while node not in seen:
        seen.add(node)
        node = depends_on[node][0]
    anchor = node

    # Shortest path from anchor back to itself
    parent: Dict[str, str] = {}
    queue = deque([anchor])
    last = None
    while queue and last is None:
        current = queue.popleft()
        for nxt in depends_on[current]:
            if nxt == anchor:
                last = current
                break
            if nxt not in parent:
                parent[nxt] = current
                queue.append(nxt)

    chain = [last]
    while chain[-1] != anchor:
        chain.append(parent[chain[-1]])
    chain.reverse()

    start = chain.index(min(chain))
    cycle = chain[start:] + chain[:start]
    return cycle + [cycle[0]]
