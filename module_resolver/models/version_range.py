# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Version Ranges

Single responsibility: parse version strings and range predicates.

Accepted range syntax (clauses joined by commas, whitespace ignored):
- ">=1.2.0, <2.0.0"  comparison clauses (>=, <=, >, <, ==, !=, ~=)
- "≥1.2.0, ≤2.0.0"   unicode aliases for >= and <=
- "*", "any", ""     any version
- "1.2.0"            bare version: at least 1.2.0
- "^1.2.0", "~1.2.0" npm-style caret and tilde ranges
- "1.*", "1.x"       wildcard match
"""

import re
from typing import List, Optional

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from module_resolver.core.errors import InvalidVersionError, InvalidVersionRangeError

_OPERATORS = ("~=", "==", "!=", "<=", ">=", "<", ">")
_ANY = {"", "*", "any", "x"}
_UNICODE_OPERATORS = {"≥": ">=", "≤": "<=", "≠": "!="}
_NUMERIC = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?$")


def parse_version(value: str) -> Version:
    """
    Parse a module version.

    Args:
        value: Version string (e.g. "1.2.3", "2.1")

    Returns:
        Parsed version

    Raises:
        InvalidVersionError: If the string is not a valid version
    """
    try:
        return Version(str(value).strip().lstrip("v"))
    except InvalidVersion as e:
        raise InvalidVersionError(str(value)) from e


def _numeric_parts(expression: str, clause: str) -> List[int]:
    match = _NUMERIC.match(clause)
    if not match:
        raise InvalidVersionRangeError(expression, f"cannot parse '{clause}'")
    return [int(p) for p in match.groups() if p is not None]


def _caret(expression: str, clause: str) -> List[str]:
    parts = _numeric_parts(expression, clause)
    padded = parts + [0] * (3 - len(parts))
    major, minor, patch = padded
    if major > 0 or len(parts) == 1:
        upper = f"{major + 1}.0.0"
    elif minor > 0 or len(parts) == 2:
        upper = f"0.{minor + 1}.0"
    else:
        upper = f"0.0.{patch + 1}"
    return [f">={major}.{minor}.{patch}", f"<{upper}"]


def _tilde(expression: str, clause: str) -> List[str]:
    parts = _numeric_parts(expression, clause)
    padded = parts + [0] * (3 - len(parts))
    major, minor, patch = padded
    if len(parts) == 1:
        upper = f"{major + 1}.0.0"
    else:
        upper = f"{major}.{minor + 1}.0"
    return [f">={major}.{minor}.{patch}", f"<{upper}"]


def _normalize_clause(expression: str, clause: str) -> List[str]:
    """Translate one range clause into packaging specifier clauses."""
    for alias, operator in _UNICODE_OPERATORS.items():
        if clause.startswith(alias):
            clause = operator + clause[len(alias):]

    if clause.lower() in _ANY:
        return []
    if clause.startswith("^"):
        return _caret(expression, clause[1:].strip())
    if clause.startswith("~") and not clause.startswith("~="):
        return _tilde(expression, clause[1:].strip())

    for operator in _OPERATORS:
        if clause.startswith(operator):
            target = clause[len(operator):].strip().lstrip("v")
            return [f"{operator}{target}"]

    # Wildcards: "1.*" or "1.x"
    segments = clause.lstrip("v").split(".")
    if segments[-1].lower() in ("*", "x"):
        head = ".".join(segments[:-1])
        return [f"=={head}.*"]

    # Bare version: minimum required version
    return [f">={clause.lstrip('v')}"]


class VersionRange:
    """
    A predicate over versions, e.g. ">=1.2.0, <2.0.0".

    Wraps a packaging SpecifierSet; pre-releases are always considered.
    """

    def __init__(self, expression: str, specifier: SpecifierSet):
        self.expression = expression
        self.specifier = specifier

    @classmethod
    def parse(cls, expression: Optional[str]) -> "VersionRange":
        """
        Parse a range expression.

        Raises:
            InvalidVersionRangeError: If any clause cannot be parsed
        """
        expression = (expression or "").strip()
        clauses: List[str] = []
        for raw in expression.split(","):
            raw = raw.strip()
            if raw or expression == "":
                clauses.extend(_normalize_clause(expression, raw))
            else:
                raise InvalidVersionRangeError(expression, "empty clause")

        try:
            specifier = SpecifierSet(",".join(clauses))
        except InvalidSpecifier as e:
            raise InvalidVersionRangeError(expression, str(e)) from e
        return cls(expression or "*", specifier)

    @property
    def is_any(self) -> bool:
        """True if the range accepts every version."""
        return len(self.specifier) == 0

    def contains(self, version) -> bool:
        """Check whether a version (string or Version) lies in the range."""
        if not isinstance(version, Version):
            version = parse_version(version)
        return self.specifier.contains(version, prereleases=True)

    def __contains__(self, version) -> bool:
        return self.contains(version)

    def __and__(self, other: "VersionRange") -> "VersionRange":
        if not isinstance(other, VersionRange):
            return NotImplemented
        return VersionRange(
            f"{self.expression}, {other.expression}",
            self.specifier & other.specifier
        )

    def lower_bound(self) -> Optional[Version]:
        """
        Highest inclusive-or-exclusive lower bound declared by the clauses.

        Used to suggest which version would need to be registered.
        """
        bounds = []
        for spec in self.specifier:
            if spec.operator in (">=", ">", "==", "~=") and not spec.version.endswith("*"):
                bounds.append(Version(spec.version))
        return max(bounds) if bounds else None

    def __eq__(self, other) -> bool:
        return isinstance(other, VersionRange) and self.specifier == other.specifier

    def __hash__(self) -> int:
        return hash(self.specifier)

    def __str__(self) -> str:
        return self.expression

    def __repr__(self) -> str:
        return f"VersionRange('{self.expression}')"
