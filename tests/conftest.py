# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Fixtures and Utilities

Provides registry builders, recording installers and configs shared by
the resolver and installer tests.
"""

import threading
from typing import Dict, List, Optional, Set

import pytest

from module_resolver.core.config import Config
from module_resolver.models import DependencySpec, ModuleDescriptor
from module_resolver.registry import InMemoryModuleRegistry


# ============================================================================
# Registry Builders
# ============================================================================

def make_registry(modules: Dict[str, tuple]) -> InMemoryModuleRegistry:
    """
    Build a registry from {name: (version, [deps])}.

    A dependency is a name (any version) or a (name, range) tuple.
    """
    descriptors = []
    for name, (version, deps) in modules.items():
        specs = []
        for dep in deps:
            if isinstance(dep, tuple):
                specs.append(DependencySpec(name=dep[0], version_range=dep[1]))
            else:
                specs.append(DependencySpec(name=dep))
        descriptors.append(ModuleDescriptor(name=name, version=version, dependencies=specs))
    return InMemoryModuleRegistry(descriptors)


@pytest.fixture
def chain_registry():
    """X <- Y <- Z, with Z also depending on X directly"""
    return make_registry({
        "X": ("1.0.0", []),
        "Y": ("1.0.0", ["X"]),
        "Z": ("1.0.0", ["X", "Y"]),
    })


@pytest.fixture
def cyclic_registry():
    """A depends on B, B depends on A"""
    return make_registry({
        "A": ("1.0.0", ["B"]),
        "B": ("1.0.0", ["A"]),
    })


@pytest.fixture
def conflict_registry():
    """P needs Q >= 2.0, R needs Q < 2.0, Q is registered at 2.1"""
    return make_registry({
        "P": ("1.0.0", [("Q", ">=2.0")]),
        "R": ("1.0.0", [("Q", "<2.0")]),
        "Q": ("2.1", []),
        "T": ("1.0.0", ["P", "R"]),
    })


@pytest.fixture
def diamond_registry():
    """app -> (web, api) -> core"""
    return make_registry({
        "core": ("2.0.0", []),
        "web": ("1.0.0", [("core", "^2.0")]),
        "api": ("1.0.0", [("core", ">=1.5, <3")]),
        "app": ("1.0.0", ["web", "api"]),
    })


# ============================================================================
# Installers
# ============================================================================

class RecordingInstaller:
    """Records install and rollback calls; fails on request"""

    def __init__(
        self,
        fail_install: Optional[Set[str]] = None,
        fail_rollback: Optional[Set[str]] = None,
        false_install: Optional[Set[str]] = None
    ):
        self.fail_install = fail_install or set()
        self.fail_rollback = fail_rollback or set()
        self.false_install = false_install or set()
        self.installed: List[str] = []
        self.rolled_back: List[str] = []
        self._lock = threading.Lock()

    def install_step(self, module_name: str):
        with self._lock:
            self.installed.append(module_name)
        if module_name in self.fail_install:
            raise RuntimeError(f"install of {module_name} exploded")
        if module_name in self.false_install:
            return False
        return True

    def rollback_step(self, module_name: str):
        with self._lock:
            self.rolled_back.append(module_name)
        if module_name in self.fail_rollback:
            raise RuntimeError(f"rollback of {module_name} exploded")


@pytest.fixture
def recording_installer():
    return RecordingInstaller()


# ============================================================================
# Config
# ============================================================================

@pytest.fixture
def test_config():
    """Sequential, name-ordered config without a transaction log"""
    return Config(log_format="text")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Never pick up a resolver.yaml from the working tree"""
    import module_resolver.core.config as config_module

    monkeypatch.setenv("MODULE_RESOLVER_CONFIG_PATH", str(tmp_path / "missing-resolver.yaml"))
    monkeypatch.setattr(config_module, "_config", None)
    yield
    monkeypatch.setattr(config_module, "_config", None)
