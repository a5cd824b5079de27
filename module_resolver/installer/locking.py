# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Subgraph Lock

Single responsibility: keep installation runs over overlapping module sets
from interleaving. Runs over disjoint sets proceed concurrently.
"""

import logging
import threading
import time
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional, Set

from module_resolver.core.errors import InstallationLockError

logger = logging.getLogger(__name__)


class SubgraphLock:
    """Exclusive lock over sets of module names"""

    def __init__(self):
        self._held: Set[str] = set()
        self._condition = threading.Condition()

    @contextmanager
    def hold(self, modules: Iterable[str], timeout: Optional[float] = None) -> Iterator[None]:
        """
        Hold every module in modules for the duration of the block.

        Args:
            modules: Module names covered by the installation run
            timeout: Seconds to wait for overlapping runs (None waits forever)

        Raises:
            InstallationLockError: If an overlapping run still holds the lock at timeout
        """
        wanted = frozenset(modules)
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._condition:
            while self._held & wanted:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    raise InstallationLockError(list(self._held & wanted), timeout)
                logger.debug(f"Waiting for installation lock on {sorted(self._held & wanted)}")
                self._condition.wait(remaining)
            self._held |= wanted

        try:
            yield
        finally:
            with self._condition:
                self._held -= wanted
                self._condition.notify_all()

    def is_locked(self, name: str) -> bool:
        with self._condition:
            return name in self._held
