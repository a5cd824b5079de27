# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Installer Module - Ordered Installation With Rollback

- orchestrator: run install steps, compensate on failure
- locking: keep overlapping runs apart
- events: publish lifecycle events
- transactions: append-only log of installation reports
"""

from .events import InstallationEvents
from .locking import SubgraphLock
from .orchestrator import CallbackInstaller, InstallationOrchestrator, Installer
from .transactions import TransactionLogger

__all__ = [
    "InstallationEvents",
    "SubgraphLock",
    "CallbackInstaller",
    "InstallationOrchestrator",
    "Installer",
    "TransactionLogger",
]
