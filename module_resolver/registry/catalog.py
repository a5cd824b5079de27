# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Module Registry

Single responsibility: look up module descriptors by name.

The resolver only reads from a registry; persisting installed state is the
registry owner's responsibility.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol, runtime_checkable

import yaml
from pydantic import ValidationError as PydanticValidationError

from module_resolver.core.errors import CatalogError, DuplicateModuleError
from module_resolver.models.module_models import ModuleDescriptor

logger = logging.getLogger(__name__)


@runtime_checkable
class ModuleRegistry(Protocol):
    """Read-only lookup from module name to descriptor"""

    def lookup(self, name: str) -> Optional[ModuleDescriptor]:
        """Return the descriptor for name, or None if it is not registered"""
        ...

    def list_all(self) -> List[ModuleDescriptor]:
        """Return every registered descriptor"""
        ...


class InMemoryModuleRegistry:
    """Registry backed by a dictionary of descriptors"""

    def __init__(self, descriptors: Iterable[ModuleDescriptor] = ()):
        """
        Initialize registry.

        Args:
            descriptors: Module descriptors (names must be unique)

        Raises:
            DuplicateModuleError: If two descriptors share a name
        """
        self._modules: Dict[str, ModuleDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._modules:
                raise DuplicateModuleError(descriptor.name)
            self._modules[descriptor.name] = descriptor

    def lookup(self, name: str) -> Optional[ModuleDescriptor]:
        return self._modules.get(name)

    def list_all(self) -> List[ModuleDescriptor]:
        return list(self._modules.values())

    def snapshot(self) -> "InMemoryModuleRegistry":
        """Independent copy for the duration of one resolution"""
        return InMemoryModuleRegistry(self._modules.values())

    def __contains__(self, name: str) -> bool:
        return name in self._modules

    def __len__(self) -> int:
        return len(self._modules)


def snapshot_registry(registry: ModuleRegistry) -> InMemoryModuleRegistry:
    """
    Freeze a registry's current contents.

    Descriptors are immutable, so copying the name mapping is enough to
    isolate a resolution from concurrent registry changes.
    """
    if isinstance(registry, InMemoryModuleRegistry):
        return registry.snapshot()
    return InMemoryModuleRegistry(registry.list_all())


class ModuleCatalogLoader:
    """
    Loads module descriptors from YAML catalogs.

    A catalog is either a single file or a directory of *.yaml / *.yml files.
    Each file holds a top-level ``modules`` key, as a list of descriptors or
    a mapping of name to descriptor:

        modules:
          housing:
            version: "1.4.0"
            dependencies:
              - name: payments
                version: ">=1.2.0, <2.0.0"
              - notifications
    """

    def __init__(self, path: Path):
        """
        Initialize catalog loader.

        Args:
            path: Catalog file or directory
        """
        self.path = Path(path)

    def load(self) -> InMemoryModuleRegistry:
        """
        Load every descriptor from the catalog.

        Returns:
            Registry holding the loaded descriptors

        Raises:
            CatalogError: If the catalog is missing or an entry is invalid
        """
        if not self.path.exists():
            raise CatalogError(f"Module catalog not found: {self.path}", source=str(self.path))

        if self.path.is_dir():
            files = sorted(
                p for p in self.path.iterdir() if p.suffix in (".yaml", ".yml")
            )
        else:
            files = [self.path]

        descriptors: List[ModuleDescriptor] = []
        seen: Dict[str, Path] = {}
        for file in files:
            for descriptor in self._load_file(file):
                if descriptor.name in seen:
                    raise DuplicateModuleError(descriptor.name, source=str(file))
                seen[descriptor.name] = file
                descriptors.append(descriptor)

        logger.info(f"Loaded {len(descriptors)} modules from {self.path}")
        return InMemoryModuleRegistry(descriptors)

    def _load_file(self, file: Path) -> List[ModuleDescriptor]:
        try:
            data = yaml.safe_load(file.read_text()) or {}
        except yaml.YAMLError as e:
            raise CatalogError(f"Invalid YAML in {file}: {e}", source=str(file)) from e

        if not isinstance(data, dict):
            raise CatalogError(f"Catalog root must be a mapping: {file}", source=str(file))

        entries = data.get("modules", [])
        if isinstance(entries, dict):
            entries = [
                {"name": name, **(entry or {})} for name, entry in entries.items()
            ]
        if not isinstance(entries, list):
            raise CatalogError(f"'modules' must be a list or mapping: {file}", source=str(file))

        return [self._parse_entry(entry, file) for entry in entries]

    def _parse_entry(self, entry: Any, file: Path) -> ModuleDescriptor:
        if not isinstance(entry, dict):
            raise CatalogError(f"Invalid module entry in {file}: {entry!r}", source=str(file))

        entry = dict(entry)
        name = entry.get("name", "<unnamed>")
        self._check_version_text(entry.get("version"), name, file)
        entry["dependencies"] = [
            self._parse_dependency(dep, name, file) for dep in entry.get("dependencies") or []
        ]

        try:
            return ModuleDescriptor(**entry)
        except PydanticValidationError as e:
            raise CatalogError(
                f"Invalid module '{name}' in {file}: {e}",
                source=str(file),
                details={"module": name, "errors": e.errors(include_url=False)}
            ) from e

    def _parse_dependency(self, dep: Any, module_name: str, file: Path) -> Any:
        # "payments" is shorthand for {"name": "payments"} (any version)
        if isinstance(dep, str):
            return {"name": dep}
        if isinstance(dep, dict):
            self._check_version_text(dep.get("version"), module_name, file, dependency=dep.get("name"))
        return dep

    @staticmethod
    def _check_version_text(value: Any, module_name: str, file: Path, dependency: Optional[str] = None):
        """
        Reject versions YAML parsed as numbers.

        An unquoted 1.10 loads as the float 1.1, so the original text is
        already lost; the catalog must quote it.
        """
        if value is None or isinstance(value, str):
            return
        where = f"dependency '{dependency}' of module '{module_name}'" if dependency else f"module '{module_name}'"
        raise CatalogError(
            f"Version of {where} in {file} must be a quoted string (YAML read it as {value!r})",
            source=str(file),
            details={"module": module_name, "dependency": dependency, "version": value}
        )
