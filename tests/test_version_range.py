# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for Version Range Parsing
"""

import pytest
from packaging.version import Version

from module_resolver.core.errors import InvalidVersionError, InvalidVersionRangeError
from module_resolver.models import DependencySpec, ModuleDescriptor, VersionRange, parse_version


class TestParseVersion:
    """Test suite for parse_version"""

    def test_plain_and_prefixed(self):
        """Test that a leading v is accepted"""
        assert parse_version("1.2.3") == Version("1.2.3")
        assert parse_version("v2.0") == Version("2.0")

    def test_invalid_version(self):
        """Test that garbage raises InvalidVersionError"""
        with pytest.raises(InvalidVersionError):
            parse_version("not-a-version")


class TestVersionRange:
    """Test suite for VersionRange"""

    @pytest.mark.parametrize("expression", ["", "*", "any", None])
    def test_any(self, expression):
        """Test the accept-everything forms"""
        version_range = VersionRange.parse(expression)

        assert version_range.is_any
        assert version_range.contains("0.0.1")
        assert version_range.contains("99.0")

    def test_comparison_clauses(self):
        """Test comma-joined comparison clauses"""
        version_range = VersionRange.parse(">=1.2.0, <2.0.0")

        assert "1.2.0" in version_range
        assert "1.9.9" in version_range
        assert "2.0.0" not in version_range
        assert "1.1.9" not in version_range

    def test_bare_version_is_a_minimum(self):
        """Test that "1.2.0" means at least 1.2.0"""
        version_range = VersionRange.parse("1.2.0")

        assert version_range.contains("1.2.0")
        assert version_range.contains("3.0.0")
        assert not version_range.contains("1.1.0")

    def test_unicode_operators(self):
        """Test that unicode comparison operators are accepted"""
        version_range = VersionRange.parse("≥1.0, ≤1.5")

        assert version_range.contains("1.5")
        assert not version_range.contains("1.6")

    def test_caret(self):
        """Test caret ranges"""
        assert VersionRange.parse("^1.2.0").contains("1.9.0")
        assert not VersionRange.parse("^1.2.0").contains("2.0.0")
        assert VersionRange.parse("^0.3.1").contains("0.3.9")
        assert not VersionRange.parse("^0.3.1").contains("0.4.0")

    def test_tilde(self):
        """Test tilde ranges"""
        assert VersionRange.parse("~1.2.0").contains("1.2.5")
        assert not VersionRange.parse("~1.2.0").contains("1.3.0")
        assert VersionRange.parse("~1").contains("1.9")

    def test_compatible_release_is_not_tilde(self):
        """Test that ~= is passed through as a compatible-release clause"""
        version_range = VersionRange.parse("~=1.4")

        assert version_range.contains("1.9")
        assert not version_range.contains("2.0")

    def test_wildcards(self):
        """Test 1.* and 1.x"""
        assert VersionRange.parse("1.*").contains("1.7.2")
        assert not VersionRange.parse("1.x").contains("2.0")

    def test_prereleases_considered(self):
        """Test that pre-release versions are matched"""
        assert VersionRange.parse(">=1.0").contains("2.0.0rc1")

    def test_intersection(self):
        """Test that & combines clauses"""
        combined = VersionRange.parse(">=2.0") & VersionRange.parse("<2.0")

        assert not combined.contains("2.0")
        assert not combined.contains("1.9")

    def test_lower_bound(self):
        """Test the highest declared lower bound"""
        combined = VersionRange.parse(">=1.0") & VersionRange.parse(">=1.4, <2")

        assert combined.lower_bound() == Version("1.4")
        assert VersionRange.parse("<2").lower_bound() is None

    @pytest.mark.parametrize("expression", [">=1.0,,<2", ">=banana", "^x.y"])
    def test_invalid_ranges(self, expression):
        """Test that malformed expressions raise InvalidVersionRangeError"""
        with pytest.raises(InvalidVersionRangeError):
            VersionRange.parse(expression)

    def test_equality(self):
        """Test equality on the normalized specifier"""
        assert VersionRange.parse(">=1.0,<2.0") == VersionRange.parse(">=1.0, <2.0")


class TestDescriptorValidation:
    """Test suite for descriptor and dependency validation"""

    def test_dependency_defaults_to_any_version(self):
        """Test that an omitted range means any version"""
        spec = DependencySpec(name="payments")

        assert spec.version_range == "*"
        assert spec.parsed_range.is_any

    def test_dependency_accepts_version_alias(self):
        """Test that "version" populates version_range"""
        spec = DependencySpec(name="payments", version=">=1.0")

        assert spec.version_range == ">=1.0"

    def test_dependency_rejects_bad_range(self):
        """Test that a malformed range fails validation"""
        with pytest.raises(ValueError):
            DependencySpec(name="payments", version_range=">=nope")

    def test_descriptor_rejects_bad_version(self):
        """Test that a malformed module version fails validation"""
        with pytest.raises(ValueError):
            ModuleDescriptor(name="housing", version="one")

    def test_descriptor_is_immutable(self):
        """Test that descriptors cannot be changed after creation"""
        descriptor = ModuleDescriptor(name="housing", version="1.0.0")

        with pytest.raises(ValueError):
            descriptor.version = "2.0.0"
