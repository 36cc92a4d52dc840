import docker
import requests
import shlex
import subprocess
import logging
from typing import List, Optional

from .errors import BackendError
from .schemas import ActionKind, HealthStatus, PlannedAction, RestartSettings, ServiceStatus

log = logging.getLogger(__name__)

# Worst first: a service is only as healthy as its least healthy replica.
_HEALTH_ORDER = [HealthStatus.UNHEALTHY, HealthStatus.STARTING, HealthStatus.NONE, HealthStatus.HEALTHY]

# The SDK only wraps HTTP errors; a dropped daemon socket surfaces as a requests error
_CONNECTION_ERRORS = (docker.errors.DockerException, requests.exceptions.RequestException, ConnectionError)


class DockerComposeBackend:
    """StackBackend implementation driving the Docker Compose CLI and the Docker SDK."""

    def __init__(self, settings: RestartSettings):
        self.compose_file = settings.compose_file
        self.compose_command = list(settings.compose_command)
        self._client = None

    @property
    def client(self):
        """Docker SDK client, connected on first use."""
        if self._client is None:
            try:
                client = docker.from_env()
                client.ping()
            except _CONNECTION_ERRORS as e:
                raise BackendError(f"Could not connect to Docker: {e}") from e
            log.debug("Docker client initialized successfully")
            self._client = client
        return self._client

    # =============================================================================
    # Command Construction
    # =============================================================================

    def _compose(self, args: List[str]) -> List[str]:
        return self.compose_command + ["-f", self.compose_file] + args

    def command_for(self, action: PlannedAction) -> List[str]:
        """The exact command line a planned action runs."""
        force = ["--force-recreate"] if action.force_recreate else []
        if action.kind == ActionKind.PULL:
            return self._compose(["pull"] + action.services)
        if action.kind in (ActionKind.RECREATE, ActionKind.START_ALL):
            return self._compose(["up", "-d", "--remove-orphans"] + force + action.services)
        if action.kind == ActionKind.STOP_ALL:
            return self._compose(["down"])
        if action.kind == ActionKind.PRUNE:
            return [self.compose_command[0], "system", "prune", "-f"]
        raise ValueError(f"Unknown action kind: {action.kind}")

    def describe(self, action: PlannedAction) -> str:
        return shlex.join(self.command_for(action))

    # =============================================================================
    # Process Helpers
    # =============================================================================

    def _query(self, args: List[str]) -> str:
        """Runs a read-only compose command and returns its stdout."""
        full_cmd = self._compose(args)
        log.debug(f"Querying: {shlex.join(full_cmd)}")
        try:
            process = subprocess.run(full_cmd, capture_output=True, text=True, encoding='utf-8')
        except FileNotFoundError as e:
            raise BackendError(f"{full_cmd[0]} command not found. Is it installed and in your PATH?", command=full_cmd) from e

        if process.returncode != 0:
            raise BackendError(
                f"`{shlex.join(full_cmd)}` failed with exit code {process.returncode}: {process.stderr.strip()}",
                command=full_cmd,
                returncode=process.returncode,
                output=process.stderr,
            )
        return process.stdout

    def _mutate(self, action: PlannedAction):
        """Runs a planned action, streaming its output, and raises on failure."""
        full_cmd = self.command_for(action)
        try:
            process = subprocess.Popen(
                full_cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
                encoding='utf-8',
            )
        except FileNotFoundError as e:
            raise BackendError(f"{full_cmd[0]} command not found. Is it installed and in your PATH?", command=full_cmd) from e

        output_lines = []
        for line in iter(process.stdout.readline, ''):
            output_lines.append(line)
            if line.strip():
                log.info(line.rstrip())

        process.wait()

        if process.returncode != 0:
            error_output = "".join(output_lines)
            if action.kind == ActionKind.STOP_ALL and "not found" in error_output.lower():
                log.debug("Nothing to stop; stack is already down.")
                return
            raise BackendError(
                f"Command `{shlex.join(full_cmd)}` failed with exit code {process.returncode}",
                command=full_cmd,
                returncode=process.returncode,
                output=error_output,
            )

    @staticmethod
    def _lines(output: str) -> List[str]:
        return [line.strip() for line in output.splitlines() if line.strip()]

    # =============================================================================
    # Queries
    # =============================================================================

    def list_declared_services(self) -> List[str]:
        return self._lines(self._query(["config", "--services"]))

    def list_running_services(self) -> List[str]:
        return self._lines(self._query(["ps", "--services", "--status=running"]))

    def get_status(self, service: str) -> ServiceStatus:
        """Inspects every running container of a service."""
        container_ids = self._lines(self._query(["ps", "-q", service]))
        if not container_ids:
            return ServiceStatus(name=service, is_running=False)

        running = True
        healths = []
        for container_id in container_ids:
            try:
                container = self.client.containers.get(container_id)
            except _CONNECTION_ERRORS as e:
                raise BackendError(f"Could not inspect container {container_id[:12]} of {service}: {e}") from e
            state = container.attrs.get("State", {})
            running = running and state.get("Status") == "running"
            healths.append(self._parse_health(state))

        health = min(healths, key=_HEALTH_ORDER.index)
        return ServiceStatus(name=service, is_running=running, health=health)

    def _parse_health(self, state: dict) -> HealthStatus:
        """Maps the Docker State.Health block; containers without a healthcheck have none."""
        health = state.get("Health") or {}
        try:
            return HealthStatus(health.get("Status", "none"))
        except ValueError:
            log.debug(f"Unrecognised health status: {health.get('Status')}")
            return HealthStatus.NONE

    # =============================================================================
    # Mutations
    # =============================================================================

    def pull_images(self, services: List[str]) -> None:
        self._mutate(PlannedAction(kind=ActionKind.PULL, services=services))

    def recreate_services(self, services: List[str], force_recreate: bool = False) -> None:
        self._mutate(PlannedAction(kind=ActionKind.RECREATE, services=services, force_recreate=force_recreate))

    def stop_all(self) -> None:
        self._mutate(PlannedAction(kind=ActionKind.STOP_ALL))

    def start_all(self, services: Optional[List[str]] = None, force_recreate: bool = False) -> None:
        self._mutate(
            PlannedAction(kind=ActionKind.START_ALL, services=services or [], force_recreate=force_recreate)
        )

    def prune(self) -> None:
        self._mutate(PlannedAction(kind=ActionKind.PRUNE))
