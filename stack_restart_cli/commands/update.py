"""
Update command implementation for stack-restart.

Pulls fresh images for the selected services and restarts them. This is the
restart pipeline with image refresh always on; everything else (selection,
strategy, readiness wait, dry run) behaves exactly as for `restart`.

`--prune` appends a `docker system prune -f` cleanup after a successful
restart. It runs through the same action runner, so a dry run only echoes it.
"""

import typer
import logging
from typing_extensions import Annotated

from ..context import AppContext
from ..errors import StackRestartError
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
from .restart import report_failure, restart_services_logic

log = logging.getLogger(__name__)


def update_services_logic(app_context: AppContext, settings: RestartSettings) -> RestartReport:
    """Business logic for updating services."""
    log.info("Pulling latest images and restarting services...")
    return restart_services_logic(app_context, settings.model_copy(update={"refresh_images": True}))


def update(
    ctx: typer.Context,
    file: ComposeFileOption = None,
    only: OnlyOption = None,
    exclude: ExceptOption = None,
    running: RunningOption = False,
    full: FullOption = None,
    force_recreate: ForceRecreateOption = False,
    scoped_start: ScopedStartOption = False,
    prune: Annotated[
        bool,
        typer.Option("--prune", help="Remove unused Docker images, networks and containers afterwards."),
    ] = False,
    no_mount_check: NoMountCheckOption = False,
    no_wait: NoWaitOption = False,
    wait: WaitOption = None,
    poll_interval: PollIntervalOption = None,
    dry_run: DryRunOption = False,
):
    """
    Pull the latest images for the selected services, then restart them.

    Use --full to cycle the whole stack, and --prune to clean up
    unused Docker resources once the restart has succeeded.
    """
    app_context: AppContext = ctx.obj
    try:
        settings = app_context.config.resolve(**build_overrides(
            file=file,
            only=only,
            exclude=exclude,
            running=running,
            full=full,
            force_recreate=force_recreate,
            scoped_start=scoped_start,
            prune=prune,
            no_mount_check=no_mount_check,
            no_wait=no_wait,
            wait=wait,
            poll_interval=poll_interval,
            dry_run=dry_run,
        ))
        update_services_logic(app_context, settings)
    except StackRestartError as e:
        raise typer.Exit(report_failure(app_context, e))
