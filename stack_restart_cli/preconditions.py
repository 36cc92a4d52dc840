import os
import logging
import psutil
from pathlib import Path

from .errors import ComposeFileNotFoundError, MountNotPresentError

log = logging.getLogger(__name__)


def is_mounted(path: str) -> bool:
    """True when path is the mountpoint of a currently mounted filesystem."""
    target = os.path.realpath(path)
    for partition in psutil.disk_partitions(all=True):
        if os.path.normpath(partition.mountpoint) == target:
            log.debug(f"{target} is mounted from {partition.device} ({partition.fstype})")
            return True
    return False


def check_required_mount(path: str) -> None:
    """
    Aborts the run when a required mount is missing.

    An empty path disables the check. There is no retry: restarting against
    an unmounted directory would bind an empty local fallback into the
    containers, so a missing mount is left for the operator to fix.
    """
    if not path:
        log.debug("Mount check disabled")
        return
    if not is_mounted(path):
        raise MountNotPresentError(path)
    log.debug(f"Required mount present: {path}")


def check_compose_file(path: str) -> None:
    """The stack descriptor must exist and be readable."""
    compose_path = Path(path)
    if not compose_path.is_file() or not os.access(compose_path, os.R_OK):
        raise ComposeFileNotFoundError(path)
