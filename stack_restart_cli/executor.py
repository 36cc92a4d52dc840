import logging
from enum import Enum
from typing import Callable, List

from .backend import StackBackend
from .display import Display
from .errors import BackendError, ExecutionError
from .schemas import ActionKind, ExecutionPlan, PlannedAction, RestartStrategy

log = logging.getLogger(__name__)


class ExecutorState(str, Enum):
    IDLE = "idle"
    PULLING = "pulling images"
    RECREATING = "recreating services"
    STOPPING_ALL = "stopping the stack"
    STARTING_ALL = "starting the stack"
    PRUNING = "pruning unused resources"
    DONE = "done"


class ActionRunner:
    """
    The single execution primitive every mutation goes through.

    Each action is appended to the plan and echoed as its backend command in
    both modes; only a live runner goes on to call the backend. Backend
    failures propagate unchanged.
    """

    def __init__(self, backend: StackBackend, display: Display, dry_run: bool = False):
        self.backend = backend
        self.display = display
        self.plan = ExecutionPlan(dry_run=dry_run)

    @property
    def dry_run(self) -> bool:
        return self.plan.dry_run

    def run(self, action: PlannedAction):
        self.plan.actions.append(action)
        self.display.action(self.backend.describe(action))
        if self.dry_run:
            return
        self._dispatch(action)()

    def _dispatch(self, action: PlannedAction) -> Callable[[], None]:
        if action.kind == ActionKind.PULL:
            return lambda: self.backend.pull_images(action.services)
        if action.kind == ActionKind.RECREATE:
            return lambda: self.backend.recreate_services(action.services, force_recreate=action.force_recreate)
        if action.kind == ActionKind.STOP_ALL:
            return self.backend.stop_all
        if action.kind == ActionKind.START_ALL:
            return lambda: self.backend.start_all(action.services or None, force_recreate=action.force_recreate)
        if action.kind == ActionKind.PRUNE:
            return self.backend.prune
        raise ValueError(f"Unknown action kind: {action.kind}")


class RestartExecutor:
    """Applies a restart strategy to a target set, one backend call per transition."""

    def __init__(self, runner: ActionRunner):
        self.runner = runner
        self.state = ExecutorState.IDLE

    def _transition(self, state: ExecutorState, action: PlannedAction):
        self.state = state
        log.debug(f"Executor state: {state.value}")
        try:
            self.runner.run(action)
        except BackendError as e:
            log.error(f"Backend call failed while {state.value}: {e}")
            raise ExecutionError(state, action, e) from e

    def execute(
        self,
        targets: List[str],
        strategy: RestartStrategy = RestartStrategy.ROLLING,
        force_recreate: bool = False,
        refresh_images: bool = False,
        scoped_start: bool = False,
        prune: bool = False,
    ) -> ExecutionPlan:
        """
        Runs the strategy and returns the plan of actions issued.

        Rolling recreates only the targets and never stops the rest of the stack.
        Full stops every service, then starts the whole stack again (or only the
        targets with scoped_start). A failure stops at the current state; nothing
        is rolled back.
        """
        if refresh_images:
            self._transition(ExecutorState.PULLING, PlannedAction(kind=ActionKind.PULL, services=targets))

        if strategy == RestartStrategy.ROLLING:
            log.info("Performing rolling restart (no full down)...")
            self._transition(
                ExecutorState.RECREATING,
                PlannedAction(kind=ActionKind.RECREATE, services=targets, force_recreate=force_recreate),
            )
        else:
            log.info("Performing full restart (down -> up -d)...")
            self._transition(ExecutorState.STOPPING_ALL, PlannedAction(kind=ActionKind.STOP_ALL))
            self._transition(
                ExecutorState.STARTING_ALL,
                PlannedAction(
                    kind=ActionKind.START_ALL,
                    services=targets if scoped_start else [],
                    force_recreate=force_recreate,
                ),
            )

        if prune:
            self._transition(ExecutorState.PRUNING, PlannedAction(kind=ActionKind.PRUNE))

        self.state = ExecutorState.DONE
        return self.runner.plan
