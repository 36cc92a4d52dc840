"""Command-line options shared by the restart, update and services commands."""

import typer
from typing import List, Optional
from typing_extensions import Annotated

from ..config import split_csv
from ..schemas import RestartStrategy

ComposeFileOption = Annotated[
    Optional[str],
    typer.Option("--file", "-f", help="Compose file (default: docker-compose.yml, env COMPOSE_FILE)."),
]
OnlyOption = Annotated[
    Optional[List[str]],
    typer.Option("--only", "-o", help="Only restart these services (comma-separated, repeatable)."),
]
ExceptOption = Annotated[
    Optional[List[str]],
    typer.Option("--except", "-x", help="Exclude these services (comma-separated, repeatable)."),
]
RunningOption = Annotated[
    bool,
    typer.Option("--running", "-r", help="Only restart currently running services."),
]
FullOption = Annotated[
    Optional[bool],
    typer.Option("--full/--rolling", help="Full restart (stop the whole stack, then start it) or rolling recreate (env ROLLING, default rolling)."),
]
ForceRecreateOption = Annotated[
    bool,
    typer.Option("--force-recreate", help="Recreate containers even if their configuration is unchanged."),
]
ScopedStartOption = Annotated[
    bool,
    typer.Option("--scoped-start", help="With --full, start only the selected services after stopping the stack."),
]
NoMountCheckOption = Annotated[
    bool,
    typer.Option("--no-mount-check", help="Skip the required mount check (env REQUIRE_MOUNT, default /mnt/nas)."),
]
NoWaitOption = Annotated[
    bool,
    typer.Option("--no-wait", help="Do not wait for healthy/ready containers."),
]
WaitOption = Annotated[
    Optional[float],
    typer.Option("--wait", "-w", help="Max seconds to wait for health/ready (default: 120)."),
]
PollIntervalOption = Annotated[
    Optional[float],
    typer.Option("--poll-interval", help="Seconds between readiness checks (default: 3)."),
]
DryRunOption = Annotated[
    bool,
    typer.Option("--dry-run", "-n", help="Print actions without executing."),
]


def build_overrides(
    file: Optional[str] = None,
    only: Optional[List[str]] = None,
    exclude: Optional[List[str]] = None,
    running: bool = False,
    full: Optional[bool] = None,
    force_recreate: bool = False,
    pull: bool = False,
    scoped_start: bool = False,
    prune: bool = False,
    no_mount_check: bool = False,
    no_wait: bool = False,
    wait: Optional[float] = None,
    poll_interval: Optional[float] = None,
    dry_run: bool = False,
) -> dict:
    """
    Maps command-line flags onto RestartSettings fields.

    Toggles only ever switch away from the default, so an unset toggle
    maps to None and leaves the env file or environment value in place.
    """
    return {
        "compose_file": file,
        "only": split_csv(only) or None,
        "exclude": split_csv(exclude) or None,
        "running_only": True if running else None,
        "strategy": None if full is None else (RestartStrategy.FULL if full else RestartStrategy.ROLLING),
        "force_recreate": True if force_recreate else None,
        "refresh_images": True if pull else None,
        "scoped_start": True if scoped_start else None,
        "prune": True if prune else None,
        "require_mount": "" if no_mount_check else None,
        "wait_health": False if no_wait else None,
        "wait_secs": wait,
        "poll_interval": poll_interval,
        "dry_run": True if dry_run else None,
    }
