# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for Module Registries and YAML Catalogs
"""

import pytest

from module_resolver.core.errors import CatalogError, DuplicateModuleError
from module_resolver.models import ModuleDescriptor, VersionRange
from module_resolver.registry import (
    InMemoryModuleRegistry,
    ModuleCatalogLoader,
    ModuleRegistry,
    snapshot_registry,
)


class TestInMemoryModuleRegistry:
    """Test suite for InMemoryModuleRegistry"""

    def test_lookup(self):
        """Test lookup of registered and unknown modules"""
        registry = InMemoryModuleRegistry([ModuleDescriptor(name="core", version="1.0")])

        assert registry.lookup("core").version == "1.0"
        assert registry.lookup("ghost") is None
        assert "core" in registry
        assert len(registry) == 1

    def test_duplicate_names_rejected(self):
        """Test that a name can only be registered once"""
        with pytest.raises(DuplicateModuleError):
            InMemoryModuleRegistry([
                ModuleDescriptor(name="core", version="1.0"),
                ModuleDescriptor(name="core", version="2.0"),
            ])

    def test_satisfies_protocol(self):
        """Test that the in-memory registry is a ModuleRegistry"""
        assert isinstance(InMemoryModuleRegistry(), ModuleRegistry)

    def test_snapshot_is_independent(self):
        """Test that a snapshot does not see later registrations"""
        registry = InMemoryModuleRegistry([ModuleDescriptor(name="core", version="1.0")])

        snapshot = snapshot_registry(registry)
        registry._modules["late"] = ModuleDescriptor(name="late", version="1.0")

        assert snapshot.lookup("late") is None
        assert snapshot.lookup("core") is not None

    def test_snapshot_of_custom_registry(self):
        """Test that any ModuleRegistry can be snapshotted via list_all"""

        class StaticRegistry:
            def lookup(self, name):
                return None

            def list_all(self):
                return [ModuleDescriptor(name="core", version="1.0")]

        snapshot = snapshot_registry(StaticRegistry())

        assert snapshot.lookup("core").name == "core"


class TestModuleCatalogLoader:
    """Test suite for ModuleCatalogLoader"""

    def test_mapping_catalog(self, tmp_path):
        """Test the name -> entry catalog form with dependency shorthand"""
        path = tmp_path / "modules.yaml"
        path.write_text(
            "modules:\n"
            "  core:\n"
            "    version: '2.1'\n"
            "  housing:\n"
            "    version: '1.4.0'\n"
            "    description: Housing applications\n"
            "    dependencies:\n"
            "      - core\n"
            "      - name: payments\n"
            "        version: '>=1.2, <2'\n"
            "        optional: true\n"
        )

        registry = ModuleCatalogLoader(path).load()

        core = registry.lookup("core")
        housing = registry.lookup("housing")
        assert core.version == "2.1"
        assert housing.description == "Housing applications"
        assert housing.dependencies[0].name == "core"
        assert housing.dependencies[0].version_range == "*"
        assert housing.dependencies[1].version_range == ">=1.2, <2"
        assert housing.dependencies[1].optional is True

    def test_list_catalog(self, tmp_path):
        """Test the list catalog form"""
        path = tmp_path / "modules.yaml"
        path.write_text(
            "modules:\n"
            "  - name: core\n"
            "    version: '1.0.0'\n"
            "  - name: web\n"
            "    version: '1.0.0'\n"
            "    dependencies:\n"
            "      - name: core\n"
            "        version: '1'\n"
        )

        registry = ModuleCatalogLoader(path).load()

        assert registry.lookup("web").dependencies[0].version_range == "1"

    def test_directory_catalog(self, tmp_path):
        """Test loading every YAML file of a directory"""
        (tmp_path / "a.yaml").write_text("modules:\n  core:\n    version: '1.0'\n")
        (tmp_path / "b.yml").write_text("modules:\n  web:\n    version: '1.0'\n")
        (tmp_path / "notes.txt").write_text("not a catalog")

        registry = ModuleCatalogLoader(tmp_path).load()

        assert sorted(d.name for d in registry.list_all()) == ["core", "web"]

    def test_duplicate_across_files(self, tmp_path):
        """Test that a module defined in two files is rejected"""
        (tmp_path / "a.yaml").write_text("modules:\n  core:\n    version: '1.0'\n")
        (tmp_path / "b.yaml").write_text("modules:\n  core:\n    version: '2.0'\n")

        with pytest.raises(DuplicateModuleError) as exc_info:
            ModuleCatalogLoader(tmp_path).load()

        assert exc_info.value.source.endswith("b.yaml")

    def test_missing_catalog(self, tmp_path):
        """Test that a missing catalog path is reported"""
        with pytest.raises(CatalogError, match="not found"):
            ModuleCatalogLoader(tmp_path / "nope.yaml").load()

    def test_invalid_entry(self, tmp_path):
        """Test that an invalid version names the module"""
        path = tmp_path / "modules.yaml"
        path.write_text("modules:\n  core:\n    version: banana\n")

        with pytest.raises(CatalogError) as exc_info:
            ModuleCatalogLoader(path).load()

        assert exc_info.value.details["module"] == "core"

    def test_unquoted_module_version_rejected(self, tmp_path):
        """Test that 1.10 read by YAML as the float 1.1 is not registered as 1.1"""
        path = tmp_path / "modules.yaml"
        path.write_text("modules:\n  core:\n    version: 1.10\n")

        with pytest.raises(CatalogError, match="quoted") as exc_info:
            ModuleCatalogLoader(path).load()

        assert exc_info.value.details["module"] == "core"
        assert exc_info.value.details["dependency"] is None

    def test_unquoted_dependency_version_rejected(self, tmp_path):
        """Test that a numeric dependency range is rejected, naming both modules"""
        path = tmp_path / "modules.yaml"
        path.write_text(
            "modules:\n"
            "  core:\n"
            "    version: '1.10'\n"
            "  web:\n"
            "    version: '1.0'\n"
            "    dependencies:\n"
            "      - name: core\n"
            "        version: 1.10\n"
        )

        with pytest.raises(CatalogError) as exc_info:
            ModuleCatalogLoader(path).load()

        assert exc_info.value.details["module"] == "web"
        assert exc_info.value.details["dependency"] == "core"

    def test_quoted_version_keeps_its_text(self, tmp_path):
        """Test that a quoted 1.10 stays 1.10 and satisfies >=1.2"""
        path = tmp_path / "modules.yaml"
        path.write_text("modules:\n  core:\n    version: '1.10'\n")

        core = ModuleCatalogLoader(path).load().lookup("core")

        assert core.version == "1.10"
        assert VersionRange.parse(">=1.2").contains(core.version)

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML is a catalog error"""
        path = tmp_path / "modules.yaml"
        path.write_text("modules: [unclosed\n")

        with pytest.raises(CatalogError):
            ModuleCatalogLoader(path).load()

    def test_modules_must_be_collection(self, tmp_path):
        """Test that a scalar modules key is rejected"""
        path = tmp_path / "modules.yaml"
        path.write_text("modules: 3\n")

        with pytest.raises(CatalogError):
            ModuleCatalogLoader(path).load()
