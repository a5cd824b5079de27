# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for the Module Dependency Resolver
"""

from setuptools import setup, find_packages

setup(
    name="module-resolver",
    version="0.1.0",
    description="Dependency resolution and ordered, all-or-nothing installation of modules",
    author="Jason Cafarelli",
    packages=find_packages(include=["module_resolver", "module_resolver.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "packaging>=23.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "module-resolver=module_resolver.cli:main",
        ]
    },
)
