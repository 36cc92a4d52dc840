import signal
import logging
import threading
from contextlib import contextmanager
from typing import Dict, List, Optional

from .backend import StackBackend
from .display import Display
from .docker_client import DockerComposeBackend
from .errors import BackendError, ResolutionError
from .executor import ActionRunner, RestartExecutor
from .preconditions import check_compose_file, check_required_mount
from .readiness import ReadinessWaiter
from .schemas import FilterSpec, ExecutionPlan, ReadinessRecord, RestartReport, RestartSettings
from .selector import select_services

log = logging.getLogger(__name__)


@contextmanager
def cancel_on_interrupt(cancel_event: threading.Event):
    """Turns Ctrl-C into a cancel signal for the duration of the block."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(signum, frame):
        log.warning("Interrupt received, cancelling wait...")
        cancel_event.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


class StackManager:
    """
    Runs the restart pipeline for one stack:
    guard -> resolve catalog -> select targets -> execute strategy -> wait for readiness.

    Each phase is also exposed on its own so commands can stop early
    (the services command never gets past selection).
    """

    def __init__(self, settings: RestartSettings, display: Display, backend: Optional[StackBackend] = None):
        self.settings = settings
        self.display = display
        self.backend = backend if backend is not None else DockerComposeBackend(settings)

    # =============================================================================
    # Pipeline Phases
    # =============================================================================

    def check_preconditions(self):
        """Fails before any backend call when the compose file or required mount is missing."""
        check_compose_file(self.settings.compose_file)
        check_required_mount(self.settings.require_mount)

    def resolve_catalog(self) -> List[str]:
        try:
            catalog = self.backend.list_declared_services()
        except BackendError as e:
            raise ResolutionError(f"Could not list services from {self.settings.compose_file}: {e}") from e
        if not catalog:
            raise ResolutionError(f"No services declared in {self.settings.compose_file}")
        log.debug(f"Declared services: {', '.join(catalog)}")
        return catalog

    def list_running(self) -> List[str]:
        try:
            return self.backend.list_running_services()
        except BackendError as e:
            raise ResolutionError(f"Could not list running services: {e}") from e

    def select_targets(self, catalog: List[str], running: Optional[List[str]] = None) -> List[str]:
        filter_spec = FilterSpec.from_settings(self.settings)
        if filter_spec.running_only and running is None:
            running = self.list_running()
        return select_services(catalog, filter_spec, running)

    def execute(self, targets: List[str]) -> ExecutionPlan:
        runner = ActionRunner(self.backend, self.display, dry_run=self.settings.dry_run)
        executor = RestartExecutor(runner)
        return executor.execute(
            targets,
            strategy=self.settings.strategy,
            force_recreate=self.settings.force_recreate,
            refresh_images=self.settings.refresh_images,
            scoped_start=self.settings.scoped_start,
            prune=self.settings.prune,
        )

    def wait_ready(self, targets: List[str], cancel_event: Optional[threading.Event] = None) -> Dict[str, ReadinessRecord]:
        cancel_event = cancel_event or threading.Event()
        waiter = ReadinessWaiter(self.backend, cancel_event=cancel_event)
        with cancel_on_interrupt(cancel_event):
            return waiter.wait_ready(targets, self.settings.wait_secs, self.settings.poll_interval)

    # =============================================================================
    # Orchestration
    # =============================================================================

    def run_restart(self, cancel_event: Optional[threading.Event] = None) -> RestartReport:
        """
        Runs every phase in order and reports what happened.

        Dry runs print the same plan a live run would execute and then skip
        the readiness wait: nothing was restarted, so there is nothing to poll.
        With the wait disabled, a single status pass still reports where each
        target stands.
        """
        self.check_preconditions()
        catalog = self.resolve_catalog()
        targets = self.select_targets(catalog)
        log.info(f"Services selected: {' '.join(targets)}")

        plan = self.execute(targets)
        report = RestartReport(catalog=catalog, targets=targets, plan=plan)

        if self.settings.dry_run:
            log.info("Dry run: skipping readiness wait.")
        elif not self.settings.wait_health:
            log.info("Readiness wait disabled.")
            report.readiness = ReadinessWaiter(self.backend).snapshot(targets)
        else:
            report.readiness = self.wait_ready(targets, cancel_event)
            report.waited = True

        return report
