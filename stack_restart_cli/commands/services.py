import typer
import logging
from typing import List, Optional

from ..context import AppContext
from ..errors import StackRestartError, SelectionError
from ..schemas import RestartSettings
from .options import (
    ComposeFileOption,
    OnlyOption,
    ExceptOption,
    RunningOption,
    build_overrides,
)
from .restart import report_failure

log = logging.getLogger(__name__)


def list_services_logic(app_context: AppContext, settings: RestartSettings) -> List[str]:
    """Shows which declared services the filters select, without touching the stack."""
    stack_manager = app_context.stack_manager(settings)
    stack_manager.check_preconditions()
    catalog = stack_manager.resolve_catalog()

    running: Optional[List[str]] = None
    if settings.running_only:
        running = stack_manager.list_running()

    try:
        selected = stack_manager.select_targets(catalog, running)
    except SelectionError:
        app_context.display.services(catalog, [], running)
        raise

    app_context.display.services(catalog, selected, running)
    return selected


def services(
    ctx: typer.Context,
    file: ComposeFileOption = None,
    only: OnlyOption = None,
    exclude: ExceptOption = None,
    running: RunningOption = False,
):
    """Lists the stack's services and which ones the filters would restart."""
    app_context: AppContext = ctx.obj
    try:
        # Read-only: the mount guard has nothing to protect here
        settings = app_context.config.resolve(**build_overrides(
            file=file,
            only=only,
            exclude=exclude,
            running=running,
            no_mount_check=True,
        ))
        list_services_logic(app_context, settings)
    except StackRestartError as e:
        raise typer.Exit(report_failure(app_context, e))
