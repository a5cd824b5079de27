# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Custom exceptions for the module resolver.

All exceptions inherit from ModuleResolverError for consistent error handling.
Resolution errors are raised before any install step runs; install step
errors are caught by the orchestrator and embedded in the report.
"""

from typing import Dict, List, Optional


class ModuleResolverError(Exception):
    """Base exception for all module resolver errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize module resolver error.

        Args:
            message: Human-readable error message
            details: Additional error details
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for reports and CLI output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(ModuleResolverError):
    """Validation failed."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize validation error.

        Args:
            message: Validation error message
            field: Field that failed validation
            details: Additional error details
        """
        super().__init__(message, details=details)
        self.field = field


class InvalidVersionError(ValidationError):
    """A module version is not a valid semantic version."""

    def __init__(self, version: str, module_name: Optional[str] = None):
        subject = f" of module '{module_name}'" if module_name else ""
        details = {"version": version}
        if module_name:
            details["module"] = module_name
        super().__init__(
            f"Invalid version{subject}: '{version}' (expected semver, e.g. '1.2.3')",
            field="version",
            details=details
        )
        self.version = version
        self.module_name = module_name


class InvalidVersionRangeError(ValidationError):
    """A dependency version range cannot be parsed."""

    def __init__(self, expression: str, reason: str = ""):
        message = f"Invalid version range: '{expression}'"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message, field="version_range", details={"expression": expression})
        self.expression = expression


class ConfigurationError(ModuleResolverError):
    """Configuration error."""

    def __init__(self, message: str, config_file: Optional[str] = None, details: Optional[dict] = None):
        """
        Initialize configuration error.

        Args:
            message: Configuration error message
            config_file: Configuration file path
            details: Additional error details
        """
        super().__init__(message, details=details)
        self.config_file = config_file


class CatalogError(ModuleResolverError):
    """A module catalog file could not be loaded."""

    def __init__(self, message: str, source: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, details=details)
        self.source = source


class DuplicateModuleError(CatalogError):
    """Two descriptors were registered under the same module name."""

    def __init__(self, name: str, source: Optional[str] = None):
        super().__init__(f"Module registered twice: {name}", source=source, details={"module": name})
        self.name = name


# Resolution errors

class ResolutionError(ModuleResolverError):
    """Base for errors that abort resolution before installation begins."""
    pass


class MissingModuleError(ResolutionError):
    """A requested module or declared dependency is absent from the registry."""

    def __init__(self, name: str, required_by: Optional[str] = None):
        """
        Initialize missing module error.

        Args:
            name: Name of the module that could not be found
            required_by: Module that declared the dependency (None for the root)
        """
        if required_by:
            message = f"Module not found: {name} (required by {required_by})"
        else:
            message = f"Module not found: {name}"
        super().__init__(message, details={"module": name, "required_by": required_by})
        self.name = name
        self.required_by = required_by


class CyclicDependencyError(ResolutionError):
    """The dependency closure contains a circular dependency."""

    def __init__(self, cycle_path: List[str]):
        """
        Initialize cyclic dependency error.

        Args:
            cycle_path: Closed cycle, first element repeated last (e.g. [A, B, A])
        """
        message = f"Circular dependency detected: {' -> '.join(cycle_path)}"
        super().__init__(message, details={"cycle_path": list(cycle_path)})
        self.cycle_path = list(cycle_path)


class VersionConflictError(ResolutionError):
    """Version ranges imposed on a module exclude its registered version."""

    def __init__(
        self,
        module_name: str,
        declared_version: str,
        conflicting_ranges: List[Dict[str, str]],
        details: Optional[dict] = None
    ):
        """
        Initialize version conflict error.

        Args:
            module_name: Module whose constraints cannot be satisfied
            declared_version: Version registered for the module
            conflicting_ranges: Constraints ({"required_by", "version_range"})
                the declared version violates
            details: Additional error details
        """
        ranges = ", ".join(
            f"{c['required_by']} requires {c['version_range']}" for c in conflicting_ranges
        )
        message = (
            f"Version conflict on {module_name}: registered version "
            f"{declared_version} does not satisfy {ranges}"
        )
        merged = {
            "module": module_name,
            "declared_version": declared_version,
            "conflicting_ranges": conflicting_ranges,
        }
        merged.update(details or {})
        super().__init__(message, details=merged)
        self.module_name = module_name
        self.declared_version = declared_version
        self.conflicting_ranges = conflicting_ranges


# Installation errors

class InstallationLockError(ModuleResolverError):
    """Another installation run holds a lock over overlapping modules."""

    def __init__(self, modules: List[str], timeout: Optional[float] = None):
        message = f"Installation already in progress for: {', '.join(sorted(modules))}"
        super().__init__(message, details={"modules": sorted(modules), "timeout": timeout})
        self.modules = sorted(modules)


class InstallStepError(ModuleResolverError):
    """An individual module's install side effect failed."""

    def __init__(self, module_name: str, message: str, details: Optional[dict] = None):
        super().__init__(f"Install step failed for {module_name}: {message}", details=details)
        self.module_name = module_name


class InstallStepTimeoutError(InstallStepError):
    """An install or rollback step exceeded the configured step timeout."""

    def __init__(self, module_name: str, timeout: float):
        super().__init__(
            module_name,
            f"step exceeded timeout ({timeout}s)",
            details={"timeout": timeout}
        )
        self.timeout = timeout


# Error Message Utilities

def sanitize_error_for_user(error: Exception, include_type: bool = True) -> str:
    """
    Sanitize error messages for reports.
    Removes stack traces and limits length.

    Args:
        error: The exception to sanitize
        include_type: Whether to include exception type

    Returns:
        User-friendly error message without stack trace
    """
    error_msg = str(error).strip() or repr(error)

    # Limit message length
    if len(error_msg) > 500:
        error_msg = error_msg[:500] + "..."

    if include_type:
        return f"{error.__class__.__name__}: {error_msg}"

    return error_msg
