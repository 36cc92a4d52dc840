import time
import logging
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .backend import StackBackend
from .errors import BackendError, ReadinessTimeout, WaitCancelled
from .schemas import HealthStatus, ReadinessRecord, ReadinessState

log = logging.getLogger(__name__)


class ReadinessWaiter:
    """
    Polls targeted services until each is ready or a deadline passes.

    A service is ready when it is running and either reports "healthy" or has
    no health check at all. Unhealthy and starting services stay pending and
    are retried until the deadline, since both are common while containers
    boot. A failed status query counts as "not ready this pass".

    The deadline is fixed once, when the wait starts. The only suspension
    point is the wait between passes, which returns early when the cancel
    event is set.
    """

    def __init__(
        self,
        backend: StackBackend,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.cancel_event = cancel_event or threading.Event()
        self._clock = clock

    def classify(self, service: str) -> ReadinessState:
        status = self.backend.get_status(service)
        if not status.is_running:
            return ReadinessState.UNKNOWN
        if status.health == HealthStatus.HEALTHY:
            return ReadinessState.HEALTHY
        if status.health == HealthStatus.UNHEALTHY:
            return ReadinessState.UNHEALTHY
        if status.health == HealthStatus.STARTING:
            return ReadinessState.STARTING
        # No health check configured: running is good enough
        return ReadinessState.RUNNING

    def _check(self, service: str, record: ReadinessRecord) -> bool:
        try:
            record.state = self.classify(service)
            record.detail = None if record.state != ReadinessState.UNKNOWN else "not running"
        except BackendError as e:
            log.debug(f"Status query for {service} failed, retrying next pass: {e}")
            record.detail = "status query failed"
        record.last_checked_at = datetime.now()
        return record.state.is_ready

    def snapshot(self, services: List[str]) -> Dict[str, ReadinessRecord]:
        """One status pass over the services, without waiting or raising."""
        records = {service: ReadinessRecord() for service in services}
        for service in services:
            self._check(service, records[service])
        return records

    def wait_ready(self, services: List[str], timeout: float, poll_interval: float = 3) -> Dict[str, ReadinessRecord]:
        """
        Blocks until every service is ready.

        Returns:
            dict: One ReadinessRecord per service, in the order given

        Raises:
            ReadinessTimeout: The deadline passed with services still pending;
                those are marked TIMED_OUT in the attached records
            WaitCancelled: The cancel event was set before all were ready
        """
        deadline = self._clock() + timeout
        records = {service: ReadinessRecord() for service in services}
        pending = list(services)

        log.info(f"Waiting up to {timeout:g}s for services to be healthy/ready...")
        while pending:
            still_pending = []
            for service in pending:
                if self._check(service, records[service]):
                    log.info(f"✓ {service} ready")
                else:
                    still_pending.append(service)
            pending = still_pending

            if not pending:
                break

            if self._clock() > deadline:
                for service in pending:
                    records[service].state = ReadinessState.TIMED_OUT
                raise ReadinessTimeout(records, pending)

            log.debug(f"Still waiting for: {', '.join(pending)}")
            if self.cancel_event.wait(poll_interval):
                raise WaitCancelled(records, pending)

        return records
