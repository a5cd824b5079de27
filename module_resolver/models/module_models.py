# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Module Resolver Data Models

Defines data structures for module descriptors, dependency graphs,
resolution results and installation reports.
"""

from typing import List, Dict, Optional, Tuple
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from module_resolver.core.errors import InvalidVersionError, InvalidVersionRangeError
from module_resolver.models.version_range import VersionRange, parse_version

MANUAL_RESOLUTION_REQUIRED = "manual_resolution_required"


class TieBreak(str, Enum):
    """Ordering among modules that become installable in the same round"""
    NAME = "name"
    DECLARATION = "declaration"


class ModuleState(str, Enum):
    """Per-module lifecycle across one resolution and installation run"""
    DISCOVERED = "discovered"
    RESOLVED = "resolved"
    INSTALLING = "installing"
    INSTALLED = "installed"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"
    ROLLBACK_FAILED = "rollback_failed"
    SKIPPED = "skipped"


class InstallationStatus(str, Enum):
    """Outcome of an installation run"""
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"
    ROLLBACK_INCOMPLETE = "rollback_incomplete"


class DependencySpec(BaseModel):
    """
    A single dependency requirement.

    The version range is a predicate over versions, e.g. ">=1.2.0, <2.0.0".
    A bare version ("1.2.0") means "at least 1.2.0".
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "payments",
                "version_range": ">=1.2.0, <2.0.0",
                "optional": False
            }
        }
    )

    name: str = Field(min_length=1)
    version_range: str = Field(default="*", alias="version")
    optional: bool = False

    @field_validator("version_range", mode="before")
    @classmethod
    def _check_range(cls, value):
        if value is None:
            return "*"
        value = str(value)
        try:
            VersionRange.parse(value)
        except InvalidVersionRangeError as e:
            raise ValueError(e.message) from e
        return value

    @property
    def parsed_range(self) -> VersionRange:
        return VersionRange.parse(self.version_range)


class ModuleDescriptor(BaseModel):
    """Identity record of an installable module. Immutable once registered."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "housing",
                "version": "1.4.0",
                "dependencies": [
                    {"name": "payments", "version_range": ">=1.2.0, <2.0.0"},
                    {"name": "notifications", "version_range": "*"}
                ]
            }
        }
    )

    name: str = Field(min_length=1)
    version: str
    dependencies: List[DependencySpec] = Field(default_factory=list)
    description: str = ""
    type: Optional[str] = None

    @field_validator("version", mode="before")
    @classmethod
    def _check_version(cls, value):
        try:
            parse_version(str(value))
        except InvalidVersionError as e:
            raise ValueError(e.message) from e
        return str(value)


class VersionConstraint(BaseModel):
    """A version range imposed on a module by one of its dependents"""
    model_config = ConfigDict(frozen=True)

    required_by: str
    version_range: str

    def to_dict(self) -> Dict[str, str]:
        return {"required_by": self.required_by, "version_range": self.version_range}


class DependencyNode(BaseModel):
    """Node in dependency graph"""
    name: str
    version: str
    required_by: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    depth: int = 0
    discovery_index: int = 0


class DependencyGraph(BaseModel):
    """
    Transitive dependency closure of a root module.

    Edges point from dependency to dependent: ("A", "B") means B depends
    on A, so A must be installed first.
    """
    root: str
    nodes: Dict[str, DependencyNode]
    edges: List[Tuple[str, str]] = Field(default_factory=list)
    constraints_by_module: Dict[str, List[VersionConstraint]] = Field(default_factory=dict)
    missing: List[str] = Field(default_factory=list)

    def dependents_of(self, name: str) -> List[str]:
        return [dependent for dependency, dependent in self.edges if dependency == name]

    def dependencies_of(self, name: str) -> List[str]:
        return [dependency for dependency, dependent in self.edges if dependent == name]


class ResolutionResult(BaseModel):
    """Successful resolution: installation order, leaves first"""
    root: str
    order: List[str]
    versions: Dict[str, str]
    generations: List[List[str]] = Field(default_factory=list)
    tie_break: TieBreak = TieBreak.NAME


class DependencyConflict(BaseModel):
    """Dependency conflict information"""
    module_name: str
    declared_version: str
    conflicting_ranges: List[VersionConstraint]
    constraints: List[VersionConstraint] = Field(default_factory=list)
    resolution: str = MANUAL_RESOLUTION_REQUIRED


class ConflictResolution(BaseModel):
    """Suggested action for a dependency conflict"""
    module_name: str
    action: str
    version: Optional[str] = None
    error: Optional[str] = None


class StepFailure(BaseModel):
    """An install or rollback step that did not succeed"""
    module_name: str
    error: str
    error_type: str
    timed_out: bool = False


class InstallationReport(BaseModel):
    """Record of one installation run"""
    id: str
    root: str
    order: List[str] = Field(default_factory=list)
    status: InstallationStatus = InstallationStatus.IN_PROGRESS
    succeeded: List[str] = Field(default_factory=list)
    failures: List[StepFailure] = Field(default_factory=list)
    rolled_back: List[str] = Field(default_factory=list)
    rollback_failures: List[StepFailure] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    module_states: Dict[str, ModuleState] = Field(default_factory=dict)
    started_at: datetime
    completed_at: Optional[datetime] = None

    @property
    def failed(self) -> Optional[StepFailure]:
        """The install step that stopped forward progress, if any"""
        return self.failures[0] if self.failures else None

    @property
    def installed(self) -> List[str]:
        """Modules left installed once the run finished"""
        return [
            name for name in self.succeeded
            if self.module_states.get(name) == ModuleState.INSTALLED
        ]

    @property
    def needs_manual_intervention(self) -> List[str]:
        """Modules whose compensating rollback failed"""
        return [f.module_name for f in self.rollback_failures]

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization"""
        data = self.model_dump(mode="json")
        data["failed"] = self.failed.model_dump() if self.failed else None
        data["installed"] = self.installed
        data["needs_manual_intervention"] = self.needs_manual_intervention
        return data


class InstallabilityReport(BaseModel):
    """Pre-flight check of a root module against the installed set"""
    root: str
    can_install: bool
    missing_dependencies: List[str] = Field(default_factory=list)
    version_conflicts: List[DependencyConflict] = Field(default_factory=list)
    suggested_resolutions: List[ConflictResolution] = Field(default_factory=list)
    cycle_path: List[str] = Field(default_factory=list)
    already_installed: List[str] = Field(default_factory=list)
    to_install: List[str] = Field(default_factory=list)
