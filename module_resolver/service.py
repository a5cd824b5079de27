# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Module Installation Service - Modular Composition

Composes the resolution pipeline and the installation orchestrator into
the public entry points.
"""

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional

from module_resolver.core.config import Config, get_config
from module_resolver.core.errors import (
    ConfigurationError,
    CyclicDependencyError,
    InvalidVersionError,
    MissingModuleError,
)
from module_resolver.installer import (
    InstallationEvents,
    InstallationOrchestrator,
    Installer,
    SubgraphLock,
    TransactionLogger,
)
from module_resolver.models.module_models import (
    InstallabilityReport,
    InstallationReport,
    ResolutionResult,
    TieBreak,
)
from module_resolver.models.version_range import parse_version
from module_resolver.registry import (
    GraphBuilder,
    ModuleCatalogLoader,
    ModuleRegistry,
    TopologicalSorter,
    VersionReconciler,
    snapshot_registry,
    suggest_resolutions,
)

logger = logging.getLogger(__name__)


class ModuleInstallationService:
    """
    Unified resolution and installation service (modular composition).

    Composes:
    - GraphBuilder: Expand the dependency closure
    - VersionReconciler: Check version ranges
    - TopologicalSorter: Installation order, cycle detection
    - InstallationOrchestrator: Install with compensating rollback
    - TransactionLogger: Log installation reports (optional)
    """

    def __init__(
        self,
        registry: ModuleRegistry,
        installer: Optional[Installer] = None,
        config: Optional[Config] = None,
        events: Optional[InstallationEvents] = None,
        transaction_logger: Optional[TransactionLogger] = None,
        lock: Optional[SubgraphLock] = None
    ):
        """
        Initialize Module Installation Service.

        Args:
            registry: Module descriptors to resolve against (read only)
            installer: Default install/rollback callbacks
            config: Resolver configuration (defaults to get_config())
            events: Lifecycle event publisher
            transaction_logger: Report log (defaults to config.transaction_log_path, if set)
            lock: Lock shared with other services installing into the same target
        """
        self.registry = registry
        self.installer = installer
        self.config = config or get_config()
        self.events = events or InstallationEvents()
        self.lock = lock or SubgraphLock()

        if transaction_logger is None and self.config.transaction_log_path:
            transaction_logger = TransactionLogger(Path(self.config.transaction_log_path))
        self.transaction_logger = transaction_logger

        self.reconciler = VersionReconciler()
        self.sorter = TopologicalSorter(TieBreak(self.config.tie_break))

    @classmethod
    def from_config(
        cls,
        config: Optional[Config] = None,
        installer: Optional[Installer] = None
    ) -> "ModuleInstallationService":
        """
        Build a service whose registry is the configured YAML catalog.

        Raises:
            ConfigurationError: If no catalog path is configured
            CatalogError: If the catalog cannot be loaded
        """
        config = config or get_config()
        if not config.catalog_path:
            raise ConfigurationError("No module catalog configured (catalog.path)")

        registry = ModuleCatalogLoader(Path(config.catalog_path)).load()
        return cls(registry, installer=installer, config=config)

    def resolve_only(self, root: str) -> ResolutionResult:
        """
        Resolve the installation order of root and its dependencies.

        Args:
            root: Module requested for installation

        Returns:
            Resolution with order (dependencies first) and generations

        Raises:
            MissingModuleError: If root or a required dependency is not registered
            VersionConflictError: If a registered version violates an imposed range
            CyclicDependencyError: If the closure contains a cycle
        """
        registry = snapshot_registry(self.registry)
        graph = GraphBuilder(registry).build(root)
        versions = self.reconciler.reconcile(graph)
        generations = self.sorter.generations(graph)

        result = ResolutionResult(
            root=root,
            order=[name for generation in generations for name in generation],
            versions=versions,
            generations=generations,
            tie_break=self.sorter.tie_break
        )
        logger.info(f"Resolved {root}: {' -> '.join(result.order)}")
        return result

    def resolve_and_install(
        self,
        root: str,
        installed: Optional[Mapping[str, str]] = None,
        installer: Optional[Installer] = None
    ) -> InstallationReport:
        """
        Resolve root and install every module not already present.

        Resolution errors are raised before any install step runs; install
        and rollback failures are reported in the returned report.

        Args:
            root: Module requested for installation
            installed: Currently installed modules (name -> version); those at
                their registered version are skipped
            installer: Install/rollback callbacks (defaults to the service's)

        Returns:
            Installation report

        Raises:
            ConfigurationError: If no installer is available
            InstallationLockError: If an overlapping run holds the lock too long
            InvalidVersionError: If an installed version cannot be parsed
        """
        installer = installer or self.installer
        if installer is None:
            raise ConfigurationError("No installer configured for resolve_and_install")
        installed = self._parse_installed(installed)

        resolution = self.resolve_only(root)
        skip = self._already_installed(resolution.versions, installed)

        orchestrator = InstallationOrchestrator(
            installer,
            events=self.events,
            parallel=self.config.parallel_install,
            max_workers=self.config.max_workers,
            step_timeout=self.config.step_timeout,
            lock=self.lock,
            lock_timeout=self.config.lock_timeout
        )
        report = orchestrator.run(resolution, skip=skip)

        if self.transaction_logger:
            self.transaction_logger.log(report)

        return report

    def check_installable(
        self,
        root: str,
        installed: Optional[Mapping[str, str]] = None
    ) -> InstallabilityReport:
        """
        Pre-flight check of root against the registry and the installed set.

        Resolution problems (missing modules, version conflicts, cycles) are
        collected into the report instead of raised.

        Args:
            root: Module requested for installation
            installed: Currently installed modules (name -> version)

        Returns:
            Installability report

        Raises:
            InvalidVersionError: If an installed version cannot be parsed
        """
        installed = self._parse_installed(installed)
        registry = snapshot_registry(self.registry)

        try:
            graph = GraphBuilder(registry).build(root, strict=False)
        except MissingModuleError as e:
            return InstallabilityReport(root=root, can_install=False, missing_dependencies=[e.name])

        # Installed modules are checked at their installed version
        versions = {name: node.version for name, node in graph.nodes.items()}
        versions.update({name: v for name, v in installed.items() if name in versions})
        conflicts = self.reconciler.find_conflicts(graph, versions)

        cycle_path = []
        order = list(graph.nodes)
        try:
            order = self.sorter.sort(graph)
        except CyclicDependencyError as e:
            cycle_path = e.cycle_path

        already = self._already_installed(
            {name: node.version for name, node in graph.nodes.items()}, installed
        )
        report = InstallabilityReport(
            root=root,
            can_install=not (graph.missing or conflicts or cycle_path),
            missing_dependencies=list(graph.missing),
            version_conflicts=conflicts,
            suggested_resolutions=suggest_resolutions(conflicts),
            cycle_path=cycle_path,
            already_installed=[name for name in order if name in already],
            to_install=[name for name in order if name not in already]
        )

        logger.info(
            f"Installability of {root}: can_install={report.can_install}, "
            f"missing={report.missing_dependencies}, conflicts={len(conflicts)}"
        )
        return report

    @staticmethod
    def _parse_installed(installed: Optional[Mapping[str, str]]) -> Dict[str, str]:
        """Validate installed versions before any resolution work"""
        installed = dict(installed or {})
        for name, version in installed.items():
            try:
                parse_version(version)
            except InvalidVersionError as e:
                raise InvalidVersionError(version, module_name=name) from e
        return installed

    @staticmethod
    def _already_installed(versions: Mapping[str, str], installed: Mapping[str, str]) -> Dict[str, str]:
        """Modules installed at exactly the version the registry holds"""
        present = {}
        for name, version in installed.items():
            if name in versions and parse_version(version) == parse_version(versions[name]):
                present[name] = version
        return present
