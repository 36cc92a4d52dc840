"""
Error classes for stack-restart.

Every fatal condition of a run is raised as a StackRestartError subclass and
caught once, at the command boundary, where it is rendered as an error panel
and turned into a non-zero exit code. Nothing below the command layer calls
sys.exit or typer.Exit.

- GuardError: a required external resource is absent (abort before mutation)
- ResolutionError: the service catalog could not be read
- SelectionError: the filters left nothing to restart
- ExecutionError: a backend mutation failed part-way through a strategy
- ReadinessTimeout: the mutation succeeded but services never became ready
- WaitCancelled: the operator interrupted the readiness wait
"""

from typing import Dict, List, Optional


class StackRestartError(Exception):
    """Base exception for stack-restart."""

    suggestion: Optional[str] = None

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message)
        if suggestion is not None:
            self.suggestion = suggestion


class ConfigError(StackRestartError):
    """Settings could not be resolved from defaults, env file, environment and flags."""

    suggestion = "Check the environment variables and flags passed to stack-restart."


class BackendError(StackRestartError):
    """A compose or Docker call failed."""

    def __init__(self, message: str, command: Optional[List[str]] = None, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.output = output


class GuardError(StackRestartError):
    """A precondition for touching the stack does not hold."""

    def __init__(self, message: str, resource: str, suggestion: Optional[str] = None):
        super().__init__(message, suggestion)
        self.resource = resource


class MountNotPresentError(GuardError):
    def __init__(self, path: str):
        super().__init__(
            f"Required mount '{path}' is not mounted. Aborting to avoid empty binds.",
            resource=path,
            suggestion=f"Mount {path} and retry, or pass --no-mount-check to skip this guard.",
        )


class ComposeFileNotFoundError(GuardError):
    def __init__(self, path: str):
        super().__init__(
            f"Compose file not found: {path}",
            resource=path,
            suggestion="Pass the stack descriptor with --file or set COMPOSE_FILE.",
        )


class ResolutionError(StackRestartError):
    """The declared services could not be listed."""

    suggestion = "Run 'docker compose config --services' to inspect the compose file."


class SelectionError(StackRestartError):
    """The filters produced an empty target set."""

    def __init__(self, catalog: List[str]):
        super().__init__(
            f"No services matched filters. All services: {' '.join(catalog)}",
            suggestion="Adjust --only/--except/--running to match one of the services listed above.",
        )
        self.catalog = list(catalog)


class ExecutionError(StackRestartError):
    """A mutating backend call failed; the remaining transitions were not attempted."""

    suggestion = "Inspect the stack with 'docker compose ps' and the output above; no rollback was attempted."

    def __init__(self, state, action, cause: BackendError):
        super().__init__(f"Restart failed while {state.value} ({action.describe()}): {cause}")
        self.state = state
        self.action = action
        self.cause = cause


class ReadinessTimeout(StackRestartError):
    """One or more targeted services did not become ready before the deadline."""

    suggestion = "Check the container logs with 'docker compose logs SERVICE'."

    def __init__(self, records: Dict, timed_out: List[str]):
        super().__init__(f"Timed out waiting for: {' '.join(timed_out)}")
        self.records = records
        self.timed_out = list(timed_out)


class WaitCancelled(StackRestartError):
    """The readiness wait was interrupted before every service became ready."""

    def __init__(self, records: Dict, pending: List[str]):
        super().__init__(f"Wait cancelled; still pending: {' '.join(pending)}")
        self.records = records
        self.pending = list(pending)
