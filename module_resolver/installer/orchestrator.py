# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Installation Orchestrator

Single responsibility: run install steps in resolved order and compensate
with rollback steps when one fails.

The run is all-or-nothing: once an install step fails, no later module is
started and every module installed earlier in the run is rolled back, in
reverse installation order. A failing rollback step is recorded and the
remaining modules are still rolled back.
"""

import logging
import threading
from concurrent.futures import (
    FIRST_COMPLETED,
    ThreadPoolExecutor,
    TimeoutError as FutureTimeout,
    wait,
)
from datetime import datetime, UTC
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from module_resolver.core.errors import (
    InstallStepError,
    InstallStepTimeoutError,
    sanitize_error_for_user,
)
from module_resolver.models.module_models import (
    InstallationReport,
    InstallationStatus,
    ModuleState,
    ResolutionResult,
    StepFailure,
)

from .events import InstallationEvents
from .locking import SubgraphLock
from .transactions import new_transaction_id

logger = logging.getLogger(__name__)


@runtime_checkable
class Installer(Protocol):
    """Side-effecting install and rollback callbacks supplied by the caller"""

    def install_step(self, module_name: str) -> Any:
        """Install one module. Raise (or return False) on failure."""
        ...

    def rollback_step(self, module_name: str) -> Any:
        """Undo a successful install_step. Raise (or return False) on failure."""
        ...


class CallbackInstaller:
    """Adapts plain callables to the Installer protocol"""

    def __init__(
        self,
        install: Callable[[str], Any],
        rollback: Optional[Callable[[str], Any]] = None
    ):
        self._install = install
        self._rollback = rollback

    def install_step(self, module_name: str) -> Any:
        return self._install(module_name)

    def rollback_step(self, module_name: str) -> Any:
        if self._rollback is None:
            return None
        return self._rollback(module_name)


class InstallationOrchestrator:
    """Executes installs in topological order with compensating rollback"""

    def __init__(
        self,
        installer: Installer,
        events: Optional[InstallationEvents] = None,
        parallel: bool = False,
        max_workers: int = 4,
        step_timeout: Optional[float] = None,
        lock: Optional[SubgraphLock] = None,
        lock_timeout: Optional[float] = None
    ):
        """
        Initialize installation orchestrator.

        Args:
            installer: Install/rollback callbacks
            events: Lifecycle event publisher
            parallel: Install each generation concurrently
            max_workers: Worker pool size for parallel generations
            step_timeout: Seconds before a step counts as failed (None = no limit)
            lock: Lock shared by runs that must not overlap
            lock_timeout: Seconds to wait for an overlapping run
        """
        self.installer = installer
        self.events = events or InstallationEvents()
        self.parallel = parallel
        self.max_workers = max_workers
        self.step_timeout = step_timeout
        self.lock = lock or SubgraphLock()
        self.lock_timeout = lock_timeout
        self._state_lock = threading.Lock()

    def run(self, resolution: ResolutionResult, skip: Iterable[str] = ()) -> InstallationReport:
        """
        Install every module of a resolution.

        Args:
            resolution: Resolved order and generations
            skip: Modules already installed; never passed to install_step

        Returns:
            Installation report (install failures are embedded, not raised)

        Raises:
            InstallationLockError: If an overlapping run holds the lock past lock_timeout
        """
        skip = set(skip)
        report = InstallationReport(
            id=new_transaction_id(),
            root=resolution.root,
            order=list(resolution.order),
            started_at=datetime.now(UTC),
            module_states={name: ModuleState.RESOLVED for name in resolution.order}
        )
        for name in resolution.order:
            if name in skip:
                report.skipped.append(name)
                report.module_states[name] = ModuleState.SKIPPED

        with self.lock.hold(resolution.order, timeout=self.lock_timeout):
            logger.info(f"Installing {resolution.root}: {len(resolution.order) - len(skip & set(resolution.order))} modules")

            if self.parallel:
                self._install_generations(resolution.generations, skip, report)
            else:
                self._install_sequential(resolution.order, skip, report)

            if report.failures:
                self._rollback(report)

        if not report.failures:
            report.status = InstallationStatus.COMPLETED
        elif report.rollback_failures:
            report.status = InstallationStatus.ROLLBACK_INCOMPLETE
        else:
            report.status = InstallationStatus.ROLLED_BACK
        report.completed_at = datetime.now(UTC)

        logger.info(
            f"Installation {report.id} of {report.root} finished: {report.status.value} "
            f"(succeeded={report.succeeded}, rolled_back={report.rolled_back})"
        )
        return report

    # Forward progress

    def _install_sequential(self, order: List[str], skip: set, report: InstallationReport):
        for name in order:
            if name in skip:
                continue

            self._set_state(report, name, ModuleState.INSTALLING)
            failure = self._attempt(self.installer.install_step, name, "install")
            if failure is not None:
                self._record_install_failure(report, failure)
                return
            self._record_install_success(report, name)

    def _install_generations(self, generations: List[List[str]], skip: set, report: InstallationReport):
        pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="module-install")
        try:
            for generation in generations:
                members = [name for name in generation if name not in skip]
                if not members:
                    continue

                futures = {}
                for name in members:
                    self._set_state(report, name, ModuleState.INSTALLING)
                    futures[pool.submit(self._attempt, self.installer.install_step, name, "install")] = name

                outcomes: Dict[str, Optional[StepFailure]] = {}
                pending = set(futures)
                while pending:
                    done, pending = wait(pending, return_when=FIRST_COMPLETED)
                    for future in done:
                        outcomes[futures[future]] = future.result()
                    if any(outcome is not None for outcome in outcomes.values()):
                        # Do not start members still queued; wait for running ones
                        for future in pending:
                            future.cancel()
                        finished, _ = wait(pending)
                        for future in finished:
                            if not future.cancelled():
                                outcomes[futures[future]] = future.result()
                        pending = set()

                failed = False
                for name in members:
                    if name not in outcomes:
                        # Cancelled before it started
                        self._set_state(report, name, ModuleState.RESOLVED)
                    elif outcomes[name] is None:
                        self._record_install_success(report, name)
                    else:
                        self._record_install_failure(report, outcomes[name])
                        failed = True

                if failed:
                    return
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    def _record_install_success(self, report: InstallationReport, name: str):
        report.succeeded.append(name)
        self._set_state(report, name, ModuleState.INSTALLED)
        self.events.module_installed(name)

    def _record_install_failure(self, report: InstallationReport, failure: StepFailure):
        report.failures.append(failure)
        self._set_state(report, failure.module_name, ModuleState.FAILED)
        self.events.module_install_failed(failure.module_name, failure.error)

    # Compensation

    def _rollback(self, report: InstallationReport):
        """Roll back every succeeded module once, most recent first"""
        logger.info(f"Rolling back {len(report.succeeded)} modules after failure of {report.failed.module_name}")

        for name in reversed(report.succeeded):
            failure = self._attempt(self.installer.rollback_step, name, "rollback")
            if failure is not None:
                report.rollback_failures.append(failure)
                self._set_state(report, name, ModuleState.ROLLBACK_FAILED)
                self.events.module_rollback_failed(name, failure.error)
                continue

            report.rolled_back.append(name)
            self._set_state(report, name, ModuleState.ROLLED_BACK)
            self.events.module_rolled_back(name)

    # Step execution

    def _attempt(self, step: Callable[[str], Any], name: str, kind: str) -> Optional[StepFailure]:
        """Run one step; any exception, timeout or False result is a failure"""
        try:
            result = self._call(step, name)
            if result is False:
                raise InstallStepError(name, f"{kind} step reported failure")
        except Exception as e:
            logger.error(f"{kind.capitalize()} step failed for {name}: {e}")
            return StepFailure(
                module_name=name,
                error=sanitize_error_for_user(e),
                error_type=e.__class__.__name__,
                timed_out=isinstance(e, InstallStepTimeoutError)
            )
        return None

    def _call(self, step: Callable[[str], Any], name: str) -> Any:
        if self.step_timeout is None:
            return step(name)

        # A step that overruns keeps its thread; the run moves on without it
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"step-{name}")
        try:
            future = executor.submit(step, name)
            try:
                return future.result(timeout=self.step_timeout)
            except FutureTimeout:
                raise InstallStepTimeoutError(name, self.step_timeout)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _set_state(self, report: InstallationReport, name: str, state: ModuleState):
        with self._state_lock:
            report.module_states[name] = state
