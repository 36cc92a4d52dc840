"""
Restart command implementation for stack-restart.

This module restarts the selected services of a Compose stack. The execution
flow runs five phases strictly forward: precondition guard, catalog
resolution, service selection, strategy execution, and readiness waiting.

## Execution Flow Diagram

```mermaid
sequenceDiagram
    participant CLI as CLI
    participant Restart as restart.py
    participant Ctx as context.py<br/>(AppContext)
    participant SM as stack_manager.py<br/>(StackManager)
    participant Ex as executor.py<br/>(RestartExecutor)
    participant W as readiness.py<br/>(ReadinessWaiter)
    participant DC as docker_client.py<br/>(DockerComposeBackend)

    CLI->>Restart: stack-restart restart --only web,worker --except worker
    Restart->>Ctx: config.resolve(**flags)
    Ctx-->>Restart: RestartSettings
    Restart->>SM: run_restart()

    Note over SM: GUARD
    SM->>SM: check_compose_file(), check_required_mount("/mnt/nas")

    Note over SM: RESOLVE + SELECT
    SM->>DC: list_declared_services()
    DC-->>SM: ["db", "web", "worker"]
    SM->>SM: select_services() → ["web"]

    Note over SM: EXECUTE
    SM->>Ex: execute(["web"], ROLLING)
    Ex->>DC: recreate_services(["web"])
    Note over Ex,DC: dry run: "+ docker compose ... up -d web" is echoed, DC is not called

    Note over SM: WAIT
    SM->>W: wait_ready(["web"], 120, 3)
    loop every poll interval until ready or deadline
        W->>DC: get_status("web")
    end
    W-->>SM: {"web": HEALTHY}
    SM-->>Restart: RestartReport
    Restart->>Restart: display.readiness(records)
```

## Key Architecture Points

- **Forward-Only Pipeline**: No phase loops back into an earlier one
- **Abort Before Mutation**: Guard, resolution and selection failures never reach the backend's mutating calls
- **Same Decisions in Dry Run**: Only the ActionRunner knows whether actions are executed
- **Single Error Boundary**: Every fatal condition is a StackRestartError rendered here; exit code 1, or 130 when the wait is interrupted
"""

import typer
import logging
from typing_extensions import Annotated

from ..context import AppContext
from ..errors import ReadinessTimeout, StackRestartError, WaitCancelled
from ..schemas import RestartReport, RestartSettings
from .options import (
    ComposeFileOption,
    OnlyOption,
    ExceptOption,
    RunningOption,
    FullOption,
    ForceRecreateOption,
    ScopedStartOption,
    NoMountCheckOption,
    NoWaitOption,
    WaitOption,
    PollIntervalOption,
    DryRunOption,
    build_overrides,
)

log = logging.getLogger(__name__)


def report_failure(app_context: AppContext, error: StackRestartError) -> int:
    """Renders a fatal error and returns the exit code for it."""
    if isinstance(error, (ReadinessTimeout, WaitCancelled)):
        app_context.display.readiness(error.records)
    app_context.display.error(str(error), error.suggestion)
    return 130 if isinstance(error, WaitCancelled) else 1


def restart_services_logic(app_context: AppContext, settings: RestartSettings) -> RestartReport:
    """Business logic for restarting services."""
    stack_manager = app_context.stack_manager(settings)
    report = stack_manager.run_restart()

    app_context.display.plan(report.plan)
    if report.readiness:
        app_context.display.readiness(report.readiness)

    if not report.plan.dry_run:
        app_context.display.success(f"Restarted {len(report.targets)} service(s): {' '.join(report.targets)}")
    log.info("Restart process completed.")
    return report


def restart(
    ctx: typer.Context,
    file: ComposeFileOption = None,
    only: OnlyOption = None,
    exclude: ExceptOption = None,
    running: RunningOption = False,
    full: FullOption = None,
    force_recreate: ForceRecreateOption = False,
    pull: Annotated[
        bool,
        typer.Option("--pull", help="Pull the latest images for the selected services first."),
    ] = False,
    scoped_start: ScopedStartOption = False,
    no_mount_check: NoMountCheckOption = False,
    no_wait: NoWaitOption = False,
    wait: WaitOption = None,
    poll_interval: PollIntervalOption = None,
    dry_run: DryRunOption = False,
):
    """Restarts the selected services of the Compose stack (rolling by default)."""
    app_context: AppContext = ctx.obj
    try:
        settings = app_context.config.resolve(**build_overrides(
            file=file,
            only=only,
            exclude=exclude,
            running=running,
            full=full,
            force_recreate=force_recreate,
            pull=pull,
            scoped_start=scoped_start,
            no_mount_check=no_mount_check,
            no_wait=no_wait,
            wait=wait,
            poll_interval=poll_interval,
            dry_run=dry_run,
        ))
        # Pruning belongs to update; PRUNE in the environment must not leak into a restart
        restart_services_logic(app_context, settings.model_copy(update={"prune": False}))
    except StackRestartError as e:
        raise typer.Exit(report_failure(app_context, e))
