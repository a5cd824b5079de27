# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Installation Events

Publishes module lifecycle events to the notification collaborator.
Fire-and-forget: a failing listener is logged and never interrupts an
installation run.
"""

import logging
import threading
from typing import Any, Callable, Dict, List

from module_resolver.core.logging import log_event

logger = logging.getLogger(__name__)

MODULE_INSTALLED = "module_installed"
MODULE_INSTALL_FAILED = "module_install_failed"
MODULE_ROLLED_BACK = "module_rolled_back"
MODULE_ROLLBACK_FAILED = "module_rollback_failed"

EventListener = Callable[[str, Dict[str, Any]], None]


class InstallationEvents:
    """Fan-out of lifecycle events to subscribed listeners"""

    def __init__(self):
        self._listeners: List[EventListener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """
        Register a listener called as listener(event_name, payload).

        Returns:
            Function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: str, **payload: Any) -> None:
        """Deliver an event to every listener, ignoring listener failures"""
        log_event(logger, event, level="INFO" if "error" not in payload else "WARNING", **payload)

        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event, dict(payload))
            except Exception as e:
                logger.warning(f"Event listener failed for {event}: {e}")

    def module_installed(self, module_name: str) -> None:
        self.emit(MODULE_INSTALLED, module_name=module_name)

    def module_install_failed(self, module_name: str, error: str) -> None:
        self.emit(MODULE_INSTALL_FAILED, module_name=module_name, error=error)

    def module_rolled_back(self, module_name: str) -> None:
        self.emit(MODULE_ROLLED_BACK, module_name=module_name)

    def module_rollback_failed(self, module_name: str, error: str) -> None:
        self.emit(MODULE_ROLLBACK_FAILED, module_name=module_name, error=error)
